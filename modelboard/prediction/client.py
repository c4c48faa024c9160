import logging
from typing import Any, Optional

import httpx
import pandas as pd

from modelboard.config import settings
from modelboard.prediction.prototype import Prototype, PrototypeData, as_frame

logger = logging.getLogger(__name__)


class PredictionClient:
    """HTTP client for an external prediction endpoint.

    Posts tabular data as JSON records and returns the response as a
    DataFrame. Calls are synchronous and never retried; HTTP and network
    errors are logged and re-raised.
    """

    def __init__(
        self,
        endpoint: str,
        api_key: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        self.endpoint = endpoint
        self._client = httpx.Client(
            timeout=timeout if timeout is not None else settings.PREDICT_TIMEOUT,
            transport=transport,
        )
        self._api_key = api_key if api_key is not None else settings.PREDICT_API_KEY

    def predict(
        self, data: PrototypeData, prototype: Optional[Prototype] = None
    ) -> pd.DataFrame:
        frame = prototype.check(data) if prototype is not None else as_frame(data)

        headers = {"Content-Type": "application/json"}
        if self._api_key:
            headers["X-API-Key"] = self._api_key

        try:
            response = self._client.post(
                self.endpoint,
                content=frame.to_json(orient="records", date_format="iso"),
                headers=headers,
            )
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            logger.warning(f"Prediction failed: {e.response.status_code} from {self.endpoint}")
            raise
        except httpx.HTTPError as e:
            logger.error(f"Error calling prediction endpoint {self.endpoint}: {e}")
            raise

        return _response_frame(response.json())

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> "PredictionClient":
        return self

    def __exit__(self, *exc) -> None:
        self.close()


def _response_frame(body: Any) -> pd.DataFrame:
    if isinstance(body, dict):
        # {"predict": [...]} style bodies become one column per key
        if all(isinstance(v, list) for v in body.values()):
            return pd.DataFrame(body)
        return pd.DataFrame([body])
    if isinstance(body, list) and body and not isinstance(body[0], dict):
        return pd.DataFrame({"predict": body})
    return pd.DataFrame(body)


def predict(
    endpoint: str,
    data: PrototypeData,
    prototype: Optional[Prototype] = None,
    **kwargs: Any,
) -> pd.DataFrame:
    """One-shot prediction call against ``endpoint``."""
    with PredictionClient(endpoint, **kwargs) as client:
        return client.predict(data, prototype=prototype)
