import pytest


# Fixture factory to build raw upload maps for a single field
@pytest.fixture
def make_upload_map():
    def _make_upload_map(handle: str, **attributes):
        return {handle: dict(attributes)}

    return _make_upload_map


# Fixture factory for a MIME resolver answering from a path -> type table
@pytest.fixture
def fake_mime_resolver():
    def _fake_mime_resolver(table: dict[str, str | None]):
        calls: list[str] = []

        def _resolve(path: str) -> str | None:
            calls.append(path)
            return table.get(path)

        _resolve.calls = calls  # type: ignore[attr-defined]
        return _resolve

    return _fake_mime_resolver
