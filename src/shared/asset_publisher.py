"""
Contentful asset publishing: upload a binary, create an asset from it, process
it for every locale and publish it.
"""
from typing import Any, BinaryIO, Callable, Dict, Optional

import contentful_management

from src.shared.logging_utils import info as log_info, warning as log_warning
from src.shared.retry_utils import retry_with_backoff
from src.shared.settings import WatermarkSettings
from src.specs.common.errors import AssetPublishError


class AssetProcessingPending(Exception):
    """A locale of the asset has no processed file URL yet"""
    pass


class AssetPublisher:
    # Polling for asynchronous asset processing
    PROCESSING_POLL_ATTEMPTS = 10
    PROCESSING_POLL_DELAY = 0.5    # 500ms
    PROCESSING_POLL_BACKOFF = 1.5

    def __init__(
        self,
        settings: WatermarkSettings,
        client_factory: Optional[Callable[..., Any]] = None,
        trace_id: Optional[str] = None,
    ):
        self.settings = settings
        self._client_factory = client_factory or contentful_management.Client
        self.trace_id = trace_id

    def _step(self, step: str, operation: Callable[[], Any], asset_id: Optional[str] = None) -> Any:
        try:
            return operation()
        except AssetPublishError:
            raise
        except Exception as e:
            raise AssetPublishError(step, str(e), asset_id=asset_id) from e

    def open_environment(self):
        client = self._step("client", lambda: self._client_factory(self.settings.cma_access_token))
        space = self._step("space lookup", lambda: client.spaces().find(self.settings.space_id))
        environment = self._step(
            "environment lookup",
            lambda: space.environments().find(self.settings.environment_id),
        )
        return client, space, environment

    def localized(self, value: Any) -> Dict[str, Any]:
        return {self.settings.locale: value}

    def create_asset(self, client, space, environment, fields: Dict[str, Any], stream: BinaryIO):
        upload = self._step("upload", lambda: client.uploads(space.id).create(stream))
        file_field = dict(fields.pop("file"))
        file_field["uploadFrom"] = upload.to_link().to_json()
        attributes = {
            "fields": {
                **{name: self.localized(value) for name, value in fields.items() if value is not None},
                "file": self.localized(file_field),
            }
        }
        asset = self._step("create", lambda: environment.assets().create(None, attributes))
        log_info(self.trace_id, "asset:created", assetId=asset.id)
        return asset

    def _processed_urls(self, asset) -> Dict[str, Optional[str]]:
        asset.reload()
        files = asset.to_json().get("fields", {}).get("file") or {}
        if not files:
            return {self.settings.locale: None}
        return {locale: (value or {}).get("url") for locale, value in files.items()}

    def process(self, asset):
        self._step("process", asset.process, asset_id=asset.id)

        def _check():
            urls = self._processed_urls(asset)
            pending = [locale for locale, url in urls.items() if not url]
            if pending:
                raise AssetProcessingPending(f"locales still processing: {', '.join(pending)}")
            return asset

        return self._step(
            "process",
            lambda: retry_with_backoff(
                _check,
                attempts=self.PROCESSING_POLL_ATTEMPTS,
                delay=self.PROCESSING_POLL_DELAY,
                backoff=self.PROCESSING_POLL_BACKOFF,
                exceptions=(AssetProcessingPending,),
            ),
            asset_id=asset.id,
        )

    def publish(self, asset):
        self._step("publish", asset.publish, asset_id=asset.id)
        log_info(self.trace_id, "asset:published", assetId=asset.id)
        return asset

    def upload_asset(
        self,
        *,
        title: str,
        description: Optional[str],
        file_name: str,
        content_type: Optional[str],
        stream: BinaryIO,
    ):
        """Create, process and publish a new asset holding `stream`.

        Nothing is rolled back: if processing or publishing fails the created
        asset stays in the space as an unpublished draft.
        """
        client, space, environment = self.open_environment()
        fields = {
            "title": title,
            "description": description,
            "file": {"contentType": content_type, "fileName": file_name},
        }
        asset = self.create_asset(client, space, environment, fields, stream)
        try:
            asset = self.process(asset)
            return self.publish(asset)
        except AssetPublishError as e:
            log_warning(self.trace_id, "asset:left_unpublished", assetId=asset.id, step=e.step)
            raise
