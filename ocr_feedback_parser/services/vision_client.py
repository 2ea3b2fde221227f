"""
Google Cloud Vision client for extracting text from scanned feedback sheets.
"""
import base64
import time
import random
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List

import fitz  # PyMuPDF, renders PDF pages to images
import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from ..config.config_manager import ConfigManager, ConfigurationError


class VisionAPIError(Exception):
    """Exception raised for Google Vision API-related errors."""
    pass


@dataclass
class OCRResult:
    """Text recognized in one input file."""
    text: str
    confidence: float
    service: str
    processing_time: float  # seconds
    auth_method: str
    page_count: int = 1


class VisionOCRClient:
    """
    Client for the Google Cloud Vision ``images:annotate`` endpoint.
    Handles authentication, PDF rendering and TEXT_DETECTION requests.
    """

    SERVICE_NAME = "Google Cloud Vision API"

    # Vision does not report a confidence for TEXT_DETECTION descriptions
    DEFAULT_CONFIDENCE = 0.95

    def __init__(self, config_manager: ConfigManager):
        """
        Initialize Vision API client.

        Args:
            config_manager: Configuration manager instance

        Raises:
            ConfigurationError: If no Vision credential is configured
        """
        self.config = config_manager
        self.logger = logging.getLogger(__name__)

        self.auth_method, self._credential = self.config.get_vision_credentials()
        if not self.config.validate_api_key():
            raise ConfigurationError("Invalid Google Vision credential")

        self.session = requests.Session()
        self._setup_session()

        self.endpoint = self.config.get_api_url()
        self.timeout = self.config.get_request_timeout()
        self.max_retries = self.config.get_max_retries()
        self.base_delay = self.config.get_retry_delay()

        self.logger.info(f"Google Vision client initialized ({self.auth_method} authentication)")

    def _setup_session(self) -> None:
        """Configure session headers and connection pooling."""
        # Retries, 5xx and 429 backoff are handled in _make_request_with_retry only
        retry_strategy = Retry(total=0, raise_on_status=False)

        adapter = HTTPAdapter(max_retries=retry_strategy)
        self.session.mount("http://", adapter)
        self.session.mount("https://", adapter)

        headers = {
            'Content-Type': 'application/json',
            'User-Agent': 'OCRFeedbackParser/1.0'
        }
        if self.auth_method == 'Access Token':
            headers['Authorization'] = f'Bearer {self._credential}'
        self.session.headers.update(headers)

    def is_available(self) -> bool:
        return self.config.has_vision_credentials()

    def get_service_info(self) -> Dict[str, Any]:
        """Describe the OCR service for status output."""
        return {
            'name': self.SERVICE_NAME,
            'is_available': self.is_available(),
            'auth_method': self.auth_method,
            'endpoint': self.endpoint
        }

    def extract_text(self, file_path: str) -> OCRResult:
        """
        Recognize the text in an image or PDF.

        Args:
            file_path: Path to a PNG/JPEG/WebP image or a PDF

        Returns:
            OCRResult with the recognized text

        Raises:
            VisionAPIError: If the request fails or no text is detected
            FileNotFoundError: If file doesn't exist
            ValueError: If file is too large
        """
        file_path = Path(file_path)

        if not file_path.exists():
            raise FileNotFoundError(f"File not found: {file_path}")

        file_size_mb = file_path.stat().st_size / (1024 * 1024)
        max_size_mb = self.config.get_max_file_size_mb()
        if file_size_mb > max_size_mb:
            raise ValueError(f"File too large: {file_size_mb:.1f}MB > {max_size_mb}MB")

        self.logger.info(f"Starting text extraction: {file_path.name} ({file_size_mb:.1f}MB)")
        start_time = time.monotonic()

        if file_path.suffix.lower() == '.pdf':
            images = self._pdf_to_images(file_path)
        else:
            images = [self._read_image(file_path)]

        page_texts = []
        for page_num, image_bytes in enumerate(images, 1):
            self.logger.debug(f"Recognizing page {page_num}/{len(images)} of {file_path.name}")
            page_text = self._annotate_image(image_bytes)
            if page_text:
                page_texts.append(page_text)

        if not page_texts:
            raise VisionAPIError(
                "No text detected in the image. Please ensure the image contains clear, readable text."
            )

        text = "\n".join(page_texts)
        processing_time = time.monotonic() - start_time

        self.logger.info(f"Google Vision succeeded for {file_path.name} in {processing_time:.2f}s: "
                         f"{len(text)} characters extracted")

        return OCRResult(
            text=text,
            confidence=self.DEFAULT_CONFIDENCE,
            service=self.SERVICE_NAME,
            processing_time=processing_time,
            auth_method=self.auth_method,
            page_count=len(images)
        )

    def _read_image(self, image_path: Path) -> bytes:
        try:
            with open(image_path, "rb") as image_file:
                return image_file.read()
        except OSError as e:
            raise VisionAPIError(f"Failed to read image file {image_path}: {e}") from e

    def _pdf_to_images(self, pdf_path: Path) -> List[bytes]:
        """
        Render PDF pages to PNG bytes for text detection.

        Args:
            pdf_path: Path to PDF file

        Returns:
            List of PNG images, one per page
        """
        try:
            images = []
            with fitz.open(str(pdf_path)) as doc:
                for page in doc:
                    # 2x zoom keeps handwriting legible without huge payloads
                    pix = page.get_pixmap(matrix=fitz.Matrix(2.0, 2.0))
                    images.append(pix.tobytes("png"))
            return images
        except Exception as e:
            raise VisionAPIError(f"Failed to convert PDF to images: {e}") from e

    def _annotate_image(self, image_bytes: bytes) -> str:
        """
        Send one image to the annotate endpoint.

        Args:
            image_bytes: Raw image content

        Returns:
            Full detected text, or "" when the page has none
        """
        payload = {
            'requests': [{
                'image': {'content': base64.b64encode(image_bytes).decode('utf-8')},
                'features': [{'type': 'TEXT_DETECTION', 'maxResults': 1}]
            }]
        }

        params = {'key': self._credential} if self.auth_method == 'API Key' else None

        response = self._make_request_with_retry(
            method='POST',
            url=self.endpoint,
            params=params,
            json=payload
        )

        try:
            result = response.json()
        except ValueError as e:
            raise VisionAPIError(f"Invalid JSON in Google Vision response: {e}") from e

        first = (result.get('responses') or [{}])[0]
        if first.get('error'):
            raise VisionAPIError(f"Google Vision API error: {first['error'].get('message', 'Unknown error')}")

        annotations = first.get('textAnnotations') or []
        if annotations and annotations[0].get('description'):
            return annotations[0]['description'].strip()

        return ""

    def _make_request_with_retry(self, method: str, url: str, **kwargs) -> requests.Response:
        """
        Make HTTP request with exponential backoff retry logic.

        Args:
            method: HTTP method (GET, POST, etc.)
            url: Request URL
            **kwargs: Additional request parameters

        Returns:
            requests.Response: Successful response

        Raises:
            VisionAPIError: If all retry attempts fail
        """
        last_exception = None

        for attempt in range(self.max_retries + 1):
            try:
                self.logger.debug(f"API request attempt {attempt + 1}/{self.max_retries + 1}")

                response = self.session.request(
                    method=method,
                    url=url,
                    timeout=self.timeout,
                    **kwargs
                )

                if response.status_code == 429:
                    if attempt < self.max_retries:
                        delay = self._calculate_backoff_delay(attempt)
                        self.logger.warning(f"Rate limited. Retrying in {delay:.1f}s...")
                        time.sleep(delay)
                        continue
                    raise VisionAPIError("Rate limit exceeded (429). Max retries reached.")

                if not response.ok:
                    error_msg = self._extract_error_message(response)
                    if attempt < self.max_retries and response.status_code >= 500:
                        delay = self._calculate_backoff_delay(attempt)
                        self.logger.warning(f"Server error ({response.status_code}). Retrying in {delay:.1f}s...")
                        time.sleep(delay)
                        continue
                    raise VisionAPIError(f"Google Vision API error: {error_msg}")

                self.logger.debug(f"API request successful on attempt {attempt + 1}")
                return response

            except requests.exceptions.Timeout as e:
                last_exception = e
                if attempt < self.max_retries:
                    delay = self._calculate_backoff_delay(attempt)
                    self.logger.warning(f"Request timeout. Retrying in {delay:.1f}s...")
                    time.sleep(delay)
                    continue

            except requests.exceptions.ConnectionError as e:
                last_exception = e
                if attempt < self.max_retries:
                    delay = self._calculate_backoff_delay(attempt)
                    self.logger.warning(f"Connection error. Retrying in {delay:.1f}s...")
                    time.sleep(delay)
                    continue

            except requests.exceptions.RequestException as e:
                raise VisionAPIError(f"Request failed: {e}") from e

        raise VisionAPIError(f"All retry attempts failed. Last error: {last_exception}")

    def _calculate_backoff_delay(self, attempt: int) -> float:
        """
        Calculate exponential backoff delay with jitter.

        Args:
            attempt: Current attempt number (0-based)

        Returns:
            float: Delay in seconds
        """
        delay = self.base_delay * (2 ** attempt)
        jitter = random.uniform(0.1, 0.5)
        return delay + jitter

    def _extract_error_message(self, response: requests.Response) -> str:
        """
        Extract error message from API response.

        Args:
            response: HTTP response object

        Returns:
            str: Error message
        """
        try:
            error_data = response.json()
            message = error_data.get('error', {}).get('message')
            return f"HTTP {response.status_code}: {message}" if message else f"HTTP {response.status_code}"
        except (ValueError, AttributeError):
            return f"HTTP {response.status_code}: {response.text[:200]}"

    def validate_connection(self) -> bool:
        """
        Check that the endpoint accepts our credentials.

        Sends an empty annotate request; a 400 means the request reached the
        API and was authenticated, 401/403 means the credential is rejected.

        Returns:
            bool: True if the credential is accepted
        """
        params = {'key': self._credential} if self.auth_method == 'API Key' else None
        try:
            response = self.session.post(self.endpoint, params=params, json={'requests': []},
                                         timeout=self.timeout)
        except requests.exceptions.RequestException as e:
            self.logger.error(f"Google Vision connection check failed: {e}")
            return False

        if response.status_code in (401, 403):
            self.logger.error(f"Google Vision rejected credentials: {self._extract_error_message(response)}")
            return False

        return response.status_code < 500
