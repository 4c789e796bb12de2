"""
Claims devnet funds from the captcha-gated faucet.
"""
import time
from typing import Callable, Optional

import requests

from . import config as core_config
from .captcha import NoCaptchaSolver
from .errors import FaucetError

BROWSER_USER_AGENT = ('Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 '
                      '(KHTML, like Gecko) Chrome/135.0.0.0 Safari/537.36')


class FaucetClaimResult:
    def __init__(self, success: bool, tx_hash: Optional[str] = None,
                 message: Optional[str] = None, error: Optional[str] = None):
        self.success = success
        self.tx_hash = tx_hash
        self.message = message
        self.error = error

    def __repr__(self) -> str:
        if self.success:
            return f"FaucetClaimResult(success=True, tx_hash='{self.tx_hash}')"
        return f"FaucetClaimResult(success=False, error='{self.error}')"


SolverFactory = Callable[[Optional[str]], NoCaptchaSolver]


class FaucetClient:
    """
    One claim = solve captcha, wait `request_delay`, POST the address with the
    captcha token. Failed claims are retried with a linearly growing delay.
    """
    def __init__(self,
                 faucet_url: str = core_config.DEFAULT_FAUCET_URL,
                 referer_url: str = core_config.DEFAULT_FAUCET_REFERER,
                 sitekey: str = core_config.DEFAULT_HCAPTCHA_SITEKEY,
                 solver_factory: Optional[SolverFactory] = None,
                 region: str = core_config.DEFAULT_CAPTCHA_REGION,
                 request_delay: float = 3.0,
                 max_retries: int = core_config.DEFAULT_FAUCET_MAX_RETRIES,
                 retry_delay: float = 5.0,
                 timeout: float = core_config.DEFAULT_HTTP_TIMEOUT_SECONDS,
                 session_factory: Callable[[], requests.Session] = requests.Session):
        self.faucet_url = faucet_url
        self.referer_url = referer_url
        self.sitekey = sitekey
        self.solver_factory = solver_factory
        self.region = region
        self.request_delay = request_delay
        self.max_retries = max_retries
        self.retry_delay = retry_delay
        self.timeout = timeout
        self.session_factory = session_factory

    @classmethod
    def from_config(cls, faucet_config: dict) -> 'FaucetClient':
        token = faucet_config.get('noCaptchaToken', '')
        base_url = faucet_config.get('noCaptchaUrl', core_config.DEFAULT_NOCAPTCHA_URL)
        return cls(
            faucet_url=faucet_config.get('url', core_config.DEFAULT_FAUCET_URL),
            referer_url=faucet_config.get('refererUrl', core_config.DEFAULT_FAUCET_REFERER),
            sitekey=faucet_config.get('hcaptchaSiteKey', core_config.DEFAULT_HCAPTCHA_SITEKEY),
            solver_factory=lambda proxy: NoCaptchaSolver(token, proxy=proxy, base_url=base_url),
            region=faucet_config.get('defaultRegion', core_config.DEFAULT_CAPTCHA_REGION),
            request_delay=core_config.ms_to_seconds(faucet_config.get('faucetDelay'), 3000),
            max_retries=int(faucet_config.get('maxRetries', core_config.DEFAULT_FAUCET_MAX_RETRIES)),
            retry_delay=core_config.ms_to_seconds(faucet_config.get('retryDelay'), 5000),
        )

    def _headers(self, captcha_token: str) -> dict:
        return {
            'h-captcha-response': captcha_token,
            'Content-Type': 'application/json',
            'User-Agent': BROWSER_USER_AGENT,
            'Origin': self.referer_url,
            'Referer': self.referer_url,
            'Accept': '*/*',
        }

    def _claim_once(self, wallet_address: str, proxy: Optional[str]) -> FaucetClaimResult:
        if self.solver_factory is None:
            raise FaucetError("No captcha solver configured")
        captcha_token = self.solver_factory(proxy).solve_hcaptcha(self.sitekey, self.referer_url, self.region)

        time.sleep(self.request_delay)

        session = self.session_factory()
        if proxy:
            session.proxies.update({'http': proxy, 'https': proxy})
        try:
            response = session.post(self.faucet_url, json={'address': wallet_address},
                                    headers=self._headers(captcha_token), timeout=self.timeout)
            response.raise_for_status()
            body = response.json()
        except requests.exceptions.HTTPError as e:
            raise FaucetError(f"Faucet API error: {e} (body: {e.response.text[:200] if e.response is not None else ''})") from e
        except requests.exceptions.RequestException as e:
            raise FaucetError(f"Faucet API error: {e}") from e
        except ValueError as e:
            raise FaucetError(f"Faucet returned non-JSON body: {e}") from e

        message = body.get('msg') if isinstance(body, dict) else None
        if not message:
            raise FaucetError(f"Unexpected response from faucet: {body}")
        tx_hash = message.split('Txhash: ')[1].strip() if 'Txhash: ' in message else None
        print(f"INFO: Faucet claim successful: {message}")
        return FaucetClaimResult(success=True, tx_hash=tx_hash, message=message)

    def claim(self, wallet_address: str, proxy: Optional[str] = None) -> FaucetClaimResult:
        """Never raises; a failed claim after all retries comes back with success=False."""
        last_error = ''
        for attempt in range(1, self.max_retries + 1):
            if attempt > 1:
                print(f"INFO: Retry #{attempt - 1} - Claiming faucet for wallet: {wallet_address}")
            else:
                print(f"INFO: Claiming faucet for wallet: {wallet_address}")
            try:
                return self._claim_once(wallet_address, proxy)
            except FaucetError as e:
                last_error = str(e)
            if attempt < self.max_retries:
                wait_seconds = self.retry_delay * attempt
                print(f"WARN: Faucet claim attempt {attempt}/{self.max_retries} failed: {last_error}. "
                      f"Retrying in {wait_seconds:g} seconds...")
                time.sleep(wait_seconds)

        print(f"ERROR: Faucet claim failed after {self.max_retries} attempts: {last_error}")
        return FaucetClaimResult(success=False, error=last_error)
