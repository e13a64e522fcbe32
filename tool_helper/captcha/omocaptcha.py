"""OmoCaptcha provider."""
from __future__ import annotations

from typing import Any

import requests

from .base import CaptchaError, CaptchaResult, TaskCaptchaProvider


class OmoCaptchaProvider(TaskCaptchaProvider):
    """OmoCaptcha v2 API. Solvers return a ``CaptchaResult`` instead of raising."""

    API_URL = "https://api.omocaptcha.com/v2"

    def image_to_text(self, image_base64: str, **options: Any) -> CaptchaResult:
        """Read the characters of an image captcha (``module="module_1"`` etc.)."""
        try:
            solution = self.solve({"type": "ImageToTextTask", "imageBase64": image_base64, **options})
        except (CaptchaError, requests.RequestException) as exc:
            return CaptchaResult(success=False, error=str(exc))
        return CaptchaResult(success=True, text=solution.get("text"), solution=solution)

    def tiktok_3d_select_object_web(
        self,
        image_base64: str,
        width_view: int,
        height_view: int,
        **options: Any,
    ) -> CaptchaResult:
        """Find the two matching 3D objects on a TikTok captcha.

        ``width_view``/``height_view`` are the rendered image size on the
        page; the returned points are in that coordinate space.
        """
        task = {
            "type": "Tiktok3DSelectObjectWebTask",
            "imageBase64": image_base64,
            "widthView": width_view,
            "heightView": height_view,
            **options,
        }
        try:
            solution = self.solve(task)
        except (CaptchaError, requests.RequestException) as exc:
            return CaptchaResult(success=False, error=str(exc))
        return CaptchaResult(
            success=True,
            point_a=solution.get("pointA"),
            point_b=solution.get("pointB"),
            solution=solution,
        )
