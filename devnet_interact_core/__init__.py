# devnet_interact_core/__init__.py

# This file makes the directory a Python package.
# Scenarios import directly from the modules, e.g.:
# from devnet_interact_core.interaction import InteractionDriver
# from devnet_interact_core.accounts import WalletManager
# from devnet_interact_core import config as core_config
