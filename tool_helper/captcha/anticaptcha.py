"""Anti-Captcha provider for token captchas."""
from __future__ import annotations

from .base import CaptchaError, TaskCaptchaProvider


class AntiCaptchaProvider(TaskCaptchaProvider):
    API_URL = "https://api.anti-captcha.com"

    def solve_token(
        self,
        site_key: str,
        page_url: str,
        *,
        task_type: str = "RecaptchaV2TaskProxyless",
    ) -> str:
        """Solve a site-key captcha and return the token.

        Raises
        ------
        CaptchaError
            On provider errors or an empty solution
        """
        solution = self.solve({"type": task_type, "websiteURL": page_url, "websiteKey": site_key})
        token = solution.get("gRecaptchaResponse") or solution.get("token") or solution.get("captchaSolve")
        if not token:
            raise CaptchaError(f"Anti-Captcha returned empty solution: {solution}")
        return token
