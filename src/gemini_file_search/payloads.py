"""Request bodies for File Search endpoints."""

from typing import Any, Mapping, Sequence


def custom_metadata_list(custom_metadata: Mapping[str, Any]) -> list[dict[str, Any]]:
    """
    Format metadata as the list of key/value objects the API expects.

    Numbers become ``numericValue``, lists of strings become
    ``stringListValue``, everything else is sent as ``stringValue``.

    Example:
        >>> custom_metadata_list({"source_type": "wikipedia", "year": 1687})
        [{'key': 'source_type', 'stringValue': 'wikipedia'}, {'key': 'year', 'numericValue': 1687}]
    """
    metadata_list = []
    for key, value in custom_metadata.items():
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            metadata_list.append({"key": key, "numericValue": value})
        elif isinstance(value, (list, tuple)):
            metadata_list.append(
                {"key": key, "stringListValue": {"values": [str(v) for v in value]}}
            )
        else:
            metadata_list.append({"key": key, "stringValue": str(value)})
    return metadata_list


def document_body(
    display_name: str | None = None,
    custom_metadata: Mapping[str, Any] | None = None,
    chunking_config: dict[str, Any] | None = None,
    mime_type: str | None = None,
) -> dict[str, Any]:
    """Metadata body for an upload straight into a store."""
    body: dict[str, Any] = {}
    if display_name:
        body["displayName"] = display_name
    if custom_metadata:
        body["customMetadata"] = custom_metadata_list(custom_metadata)
    # Leave chunking to the service defaults unless asked
    if chunking_config:
        body["chunkingConfig"] = chunking_config
    if mime_type:
        body["mimeType"] = mime_type
    return body


def file_body(display_name: str | None = None) -> dict[str, Any]:
    """Metadata body for a standalone file upload."""
    if not display_name:
        return {}
    return {"file": {"displayName": display_name}}


def import_file_body(
    file_name: str,
    custom_metadata: Mapping[str, Any] | None = None,
    chunking_config: dict[str, Any] | None = None,
) -> dict[str, Any]:
    """Body for importing an uploaded file resource into a store."""
    body: dict[str, Any] = {"fileName": file_name}
    if custom_metadata:
        body["customMetadata"] = custom_metadata_list(custom_metadata)
    if chunking_config:
        body["chunkingConfig"] = chunking_config
    return body


def generate_content_body(
    prompt: str,
    store_names: Sequence[str],
    metadata_filter: str | None = None,
    generation_config: dict[str, Any] | None = None,
) -> dict[str, Any]:
    """Body for a generateContent call grounded on File Search stores."""
    if isinstance(store_names, str):
        store_names = [store_names]
    if not store_names:
        raise ValueError("At least one File Search store name is required")

    file_search: dict[str, Any] = {"fileSearchStoreNames": list(store_names)}
    if metadata_filter:
        file_search["metadataFilter"] = metadata_filter

    body: dict[str, Any] = {
        "contents": [{"role": "user", "parts": [{"text": prompt}]}],
        "tools": [{"fileSearch": file_search}],
    }
    if generation_config:
        body["generationConfig"] = generation_config
    return body
