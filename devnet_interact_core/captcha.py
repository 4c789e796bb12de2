"""
Client for the NoCaptcha hCaptcha solving service.
"""
import time
from typing import Any, Dict, Optional

import requests

from . import config as core_config
from .accounts import mask_proxy
from .errors import CaptchaError

HCAPTCHA_ENDPOINT = '/api/wanda/hcaptcha/universal'


class NoCaptchaSolver:
    """
    Solves hCaptcha challenges through the solver's HTTP API. The proxy, when
    given, is forwarded to the solver as-is and also used for the API call.
    """
    def __init__(self,
                 user_token: str,
                 proxy: Optional[str] = None,
                 base_url: str = core_config.DEFAULT_NOCAPTCHA_URL,
                 timeout: float = core_config.DEFAULT_HTTP_TIMEOUT_SECONDS,
                 max_retries: int = core_config.DEFAULT_CAPTCHA_MAX_RETRIES,
                 retry_delay: float = core_config.DEFAULT_CAPTCHA_RETRY_DELAY_SECONDS,
                 session: Optional[requests.Session] = None):
        self.user_token = user_token
        self.proxy = proxy
        self.base_url = base_url.rstrip('/')
        self.timeout = timeout
        self.max_retries = max_retries
        self.retry_delay = retry_delay
        self.session = session or requests.Session()
        self.session.headers.update({'User-Token': user_token, 'Content-Type': 'application/json'})
        if proxy:
            self.session.proxies.update({'http': proxy, 'https': proxy})
            print(f"INFO: NoCaptcha initialized with proxy: {mask_proxy(proxy)}")
        else:
            print("INFO: NoCaptcha initialized without proxy")

    def _request_once(self, payload: Dict[str, Any]) -> str:
        try:
            response = self.session.post(f"{self.base_url}{HCAPTCHA_ENDPOINT}", json=payload, timeout=self.timeout)
            response.raise_for_status()
            result = response.json()
        except requests.exceptions.RequestException as e:
            raise CaptchaError(f"NoCaptcha API error: {e}") from e
        except ValueError as e:
            raise CaptchaError(f"NoCaptcha returned non-JSON body: {e}") from e

        if result.get('status') != 1:
            raise CaptchaError(f"Error solving hCaptcha: {result}")
        data = result.get('data')
        if not data:
            raise CaptchaError("NoCaptcha response missing data field")
        token = data.get('generated_pass_UUID') or data.get('response')
        if not token:
            raise CaptchaError(f"NoCaptcha response missing token: {data}")
        return token

    def solve_hcaptcha(self, sitekey: str, referer: str, region: Optional[str] = None) -> str:
        """
        :return: The hCaptcha pass token.
        :raises CaptchaError: After max_retries failed attempts.
        """
        payload: Dict[str, Any] = {
            'sitekey': sitekey,
            'referer': referer,
            'invisible': False,
            'need_ekey': False,
        }
        if self.proxy:
            payload['proxy'] = self.proxy
            payload['region'] = region or core_config.DEFAULT_CAPTCHA_REGION

        last_error: Optional[CaptchaError] = None
        for attempt in range(1, self.max_retries + 1):
            if attempt > 1:
                print(f"INFO: Retry #{attempt - 1} - Attempting to solve hCaptcha for {referer}")
            else:
                print(f"INFO: Attempting to solve hCaptcha for {referer}")
            try:
                token = self._request_once(payload)
            except CaptchaError as e:
                last_error = e
                if attempt < self.max_retries:
                    wait_seconds = self.retry_delay * attempt
                    print(f"WARN: hCaptcha solve failed (attempt {attempt}/{self.max_retries}): {e}. "
                          f"Retrying in {wait_seconds:g} seconds...")
                    time.sleep(wait_seconds)
                continue
            print(f"INFO: Successfully solved hCaptcha, token: {token[:30]}...")
            return token

        print(f"ERROR: Failed to solve hCaptcha after {self.max_retries} attempts: {last_error}")
        raise last_error or CaptchaError("Failed to solve hCaptcha")
