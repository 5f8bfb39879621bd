"""
Sendcloud API Connector - shipping labels for consignment orders
Without API credentials the client runs in simulated mode
"""
import random
import requests
import time
import logging
from typing import Dict, Any, Optional
from urllib.parse import urljoin
from requests.auth import HTTPBasicAuth

logger = logging.getLogger(__name__)


class SendcloudAPIClient:
    """Sendcloud API Client - parcels endpoint"""

    def __init__(self, api_url: str, api_key: Optional[str] = None, api_secret: Optional[str] = None):
        self.api_url = api_url.strip().rstrip('/')
        self.simulated = not (api_key and api_secret)
        self.auth = None if self.simulated else HTTPBasicAuth(api_key, api_secret)
        self.headers = {
            "Content-Type": "application/json",
            "Accept": "application/json"
        }

        self.max_retries = 3
        self.retry_delay = 2

        if self.simulated:
            logger.warning("SendcloudAPIClient: no credentials, labels will be simulated")
        else:
            logger.info(f"SendcloudAPIClient initialized: {self.api_url}")

    def _make_request(
        self,
        method: str,
        endpoint: str,
        params: Dict = None,
        data: Dict = None,
        timeout: int = 30
    ) -> requests.Response:
        """HTTP request with retry logic"""
        url = urljoin(self.api_url + '/', endpoint.lstrip('/'))

        for attempt in range(self.max_retries):
            try:
                response = requests.request(
                    method=method,
                    url=url,
                    headers=self.headers,
                    auth=self.auth,
                    params=params,
                    json=data,
                    timeout=timeout
                )
                response.raise_for_status()
                return response

            except requests.exceptions.HTTPError as e:
                if e.response.status_code in [429, 500, 502, 503, 504] and attempt < self.max_retries - 1:
                    wait_time = self.retry_delay * (2 ** attempt)
                    logger.warning(f"HTTP {e.response.status_code}, retrying in {wait_time}s... (attempt {attempt + 1}/{self.max_retries})")
                    time.sleep(wait_time)
                else:
                    logger.error(f"API Error ({url}): {e}")
                    raise

            except requests.exceptions.RequestException as e:
                logger.error(f"Connection Error ({url}): {e}")
                raise

    @staticmethod
    def pick_carrier(weight_kg: float) -> str:
        """Carrier choice for simulated labels"""
        if weight_kg < 1:
            return "USPS"
        if weight_kg > 10:
            return "FedEx"
        return "UPS"

    def _simulated_label(self, to_address: Dict, parcel: Dict) -> Dict[str, str]:
        tracking_number = f"SC{random.randint(0, 999999999):09d}"
        logger.info(f"Simulated label for {to_address.get('name')} ({parcel.get('weight')}kg)")
        return {
            "label_url": f"https://sendcloud.example.com/labels/{tracking_number}.pdf",
            "tracking_number": tracking_number,
            "carrier": self.pick_carrier(float(parcel.get("weight") or 0)),
        }

    def create_label(self, to_address: Dict[str, Any], parcel: Dict[str, Any]) -> Dict[str, str]:
        """
        Creates a parcel with a label

        Args:
            to_address: name, address, city, postal_code, country, email
            parcel: weight (kg), order_number

        Returns:
            {'label_url': str, 'tracking_number': str, 'carrier': str}
        """
        if self.simulated:
            return self._simulated_label(to_address, parcel)

        payload = {
            "parcel": {
                "name": to_address.get("name"),
                "address": to_address.get("address"),
                "city": to_address.get("city"),
                "postal_code": to_address.get("postal_code"),
                "country": to_address.get("country") or "NL",
                "email": to_address.get("email"),
                "weight": f"{float(parcel.get('weight') or 1):.3f}",
                "order_number": parcel.get("order_number"),
                "request_label": True,
            }
        }

        response = self._make_request("POST", "/parcels", data=payload)
        data = response.json().get("parcel", {})

        label = data.get("label") or {}
        label_url = label.get("label_printer")
        if not label_url and label.get("normal_printer"):
            label_url = label["normal_printer"][0]

        carrier = data.get("carrier") or {}
        return {
            "label_url": label_url,
            "tracking_number": data.get("tracking_number"),
            "carrier": carrier.get("code") if isinstance(carrier, dict) else carrier,
        }

    def test_connection(self) -> Dict[str, Any]:
        """Checks the API credentials"""
        if self.simulated:
            return {'success': True, 'message': 'Sendcloud running in simulated mode'}
        try:
            response = self._make_request("GET", "/user")
            return {
                'success': True,
                'message': 'Sendcloud API connection successful',
                'status_code': response.status_code
            }
        except requests.exceptions.RequestException as e:
            return {
                'success': False,
                'message': f'Sendcloud API connection failed: {str(e)}'
            }
