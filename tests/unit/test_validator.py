import pytest

from upload_validator.core.validation import REASON_SIZE_EXCEEDED
from upload_validator.core.validation import REASON_UNKNOWN_ERROR
from upload_validator.core.validation import UPLOAD_ERROR_REASONS
from upload_validator.core.validation import UploadErrorCode
from upload_validator.models.upload_models import FileRecord
from upload_validator.services.validator import FileUploadValidator
from upload_validator.services.validator import file_extension

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _single(name="me.png", error=0, tmp_name="/tmp/up1", type_="image/png"):
    return {"avatar": {"error": error, "name": name, "tmp_name": tmp_name, "size": 812, "type": type_}}


def _avatar_validator(files, resolver):
    validator = FileUploadValidator("avatar", files, mime_resolver=resolver)
    validator.add_allowed_file_type("image")
    validator.add_allowed_mime_type("image/jpeg", "image/png")
    validator.add_allowed_file_extension("jpg", "jpeg", "png")
    return validator


# ---------------------------------------------------------------------------
# Registration
# ---------------------------------------------------------------------------


def test_registration_lowercases_and_appends():
    validator = FileUploadValidator("avatar", {})
    validator.add_allowed_file_extension("JPG", ".Png")
    validator.add_allowed_file_extension("jpg")
    validator.add_allowed_file_type("Image", "VIDEO")
    validator.add_allowed_mime_type("Image/PNG")

    assert validator.allowed_file_extensions == ("jpg", "png", "jpg")
    assert validator.allowed_file_types == ("image", "video")
    assert validator.allowed_mime_types == ("image/png",)


def test_registration_is_chainable():
    validator = FileUploadValidator("avatar", {}).add_allowed_file_extension("pdf").add_allowed_mime_type("application/pdf")
    assert validator.allowed_file_extensions == ("pdf",)
    assert validator.allowed_mime_types == ("application/pdf",)


# ---------------------------------------------------------------------------
# Presence and platform errors
# ---------------------------------------------------------------------------


@pytest.mark.parametrize("files", [None, {}, {"avatar": {}}, {"avatar": {"error": 4, "name": ""}}])
def test_missing_upload_fails(files):
    outcome = FileUploadValidator("avatar", files).is_valid()
    assert not outcome
    assert outcome.reason == "please upload a file."
    assert outcome.code == "no_upload"


def test_no_constraints_accepts_anything(fake_mime_resolver):
    resolver = fake_mime_resolver({})
    outcome = FileUploadValidator("avatar", _single(name="whatever.exe"), mime_resolver=resolver).is_valid()

    assert outcome.valid is True
    assert outcome.reason is None
    assert resolver.calls == []


@pytest.mark.parametrize(
    "code",
    [
        UploadErrorCode.INI_SIZE,
        UploadErrorCode.FORM_SIZE,
        UploadErrorCode.PARTIAL,
        UploadErrorCode.NO_TMP_DIR,
        UploadErrorCode.CANT_WRITE,
        UploadErrorCode.EXTENSION,
    ],
)
def test_known_platform_errors(code):
    outcome = FileUploadValidator("avatar", _single(error=int(code))).is_valid()
    assert outcome.valid is False
    assert outcome.reason == UPLOAD_ERROR_REASONS[code]
    assert outcome.code == "upload_error"


def test_size_codes_share_one_reason():
    assert UPLOAD_ERROR_REASONS[UploadErrorCode.INI_SIZE] == REASON_SIZE_EXCEEDED
    assert UPLOAD_ERROR_REASONS[UploadErrorCode.FORM_SIZE] == REASON_SIZE_EXCEEDED


def test_no_file_code_reports_presence_reason():
    # Code 4 is caught by the presence check before the error-code table is consulted
    outcome = FileUploadValidator("avatar", _single(error=int(UploadErrorCode.NO_FILE))).is_valid()
    assert outcome.reason == "please upload a file."
    assert outcome.code == "no_upload"


def test_no_file_code_inside_multi_upload_fails_presence():
    files = {"docs": {"error": [0, 4], "name": ["a.pdf", ""]}}
    outcome = FileUploadValidator("docs", files).is_valid()
    assert outcome.reason == "please upload a file."


@pytest.mark.parametrize("code", [5, 9, 42, -1, "abc", float("inf"), float("nan"), 3.5, "3.5", "inf"])
def test_unknown_platform_error(code):
    outcome = FileUploadValidator("avatar", _single(error=code)).is_valid()
    assert outcome.valid is False
    assert outcome.reason == REASON_UNKNOWN_ERROR
    assert outcome.code == "upload_error"


def test_multi_file_partial_error_on_second_file():
    files = {
        "photos": {
            "error": [UploadErrorCode.OK, UploadErrorCode.PARTIAL],
            "name": ["a.jpg", "b.jpg"],
            "tmp_name": ["/tmp/a", "/tmp/b"],
            "size": [1, 2],
            "type": ["image/jpeg", "image/jpeg"],
        }
    }
    outcome = FileUploadValidator("photos", files).is_valid()
    assert outcome.valid is False
    assert outcome.reason == "uploaded file was only partially uploaded. please try again."


# ---------------------------------------------------------------------------
# Content checks
# ---------------------------------------------------------------------------


def test_avatar_png_is_valid(fake_mime_resolver):
    resolver = fake_mime_resolver({"/tmp/up1": "image/png"})
    outcome = _avatar_validator(_single(), resolver).is_valid()
    assert outcome.valid is True


def test_avatar_pdf_is_invalid_type(fake_mime_resolver):
    resolver = fake_mime_resolver({"/tmp/up1": "application/pdf"})
    outcome = _avatar_validator(_single(), resolver).is_valid()
    assert outcome.valid is False
    assert outcome.reason == "invalid file type."
    assert outcome.code == "invalid_type"


def test_mime_is_resolved_once_per_file(fake_mime_resolver):
    resolver = fake_mime_resolver({"/tmp/up1": "image/png"})
    _avatar_validator(_single(), resolver).is_valid()
    assert resolver.calls == ["/tmp/up1"]


def test_mime_comparison_is_case_insensitive(fake_mime_resolver):
    resolver = fake_mime_resolver({"/tmp/up1": "IMAGE/PNG"})
    validator = FileUploadValidator("avatar", _single(), mime_resolver=resolver).add_allowed_mime_type("image/png")
    assert validator.is_valid().valid is True


def test_type_category_check(fake_mime_resolver):
    resolver = fake_mime_resolver({"/tmp/up1": "video/mp4"})
    validator = FileUploadValidator("avatar", _single(name="clip.mp4"), mime_resolver=resolver)
    validator.add_allowed_file_type("video")
    assert validator.is_valid().valid is True

    validator = FileUploadValidator("avatar", _single(name="clip.mp4"), mime_resolver=resolver)
    validator.add_allowed_file_type("image", "audio")
    assert validator.is_valid().reason == "invalid file type."


@pytest.mark.parametrize("resolved", [None, ""])
def test_unresolvable_mime_fails_type_checks(fake_mime_resolver, resolved):
    resolver = fake_mime_resolver({"/tmp/up1": resolved})
    validator = FileUploadValidator("avatar", _single(), mime_resolver=resolver).add_allowed_file_type("image")
    assert validator.is_valid().reason == "invalid file type."


def test_raising_resolver_fails_type_check():
    def _boom(path):
        raise RuntimeError("libmagic unavailable")

    validator = FileUploadValidator("avatar", _single(), mime_resolver=_boom).add_allowed_mime_type("image/png")
    outcome = validator.is_valid()
    assert outcome.valid is False
    assert outcome.reason == "invalid file type."


def test_default_resolver_is_used(monkeypatch):
    monkeypatch.setattr("upload_validator.services.validator.resolve_mime_type", lambda path: "image/png")
    validator = FileUploadValidator("avatar", _single()).add_allowed_mime_type("image/png")
    assert validator.is_valid().valid is True


@pytest.mark.parametrize(
    "name, expected",
    [
        ("photo.JPG", True),
        ("photo.png", True),
        ("photo.gif", False),
        ("photo", False),
        ("archive.tar.jpg", True),
        ("dir.jpg/photo", False),
    ],
)
def test_extension_check(name, expected):
    validator = FileUploadValidator("avatar", _single(name=name)).add_allowed_file_extension("jpg", "png")
    outcome = validator.is_valid()
    assert outcome.valid is expected
    if not expected:
        assert outcome.reason == "invalid file extension."
        assert outcome.code == "invalid_extension"


def test_multi_file_stops_at_first_failing_check(fake_mime_resolver):
    files = {
        "photos": {
            "error": [0, 0],
            "name": ["a.jpg", "b.gif"],
            "tmp_name": ["/tmp/a", "/tmp/b"],
            "size": [1, 2],
            "type": ["image/jpeg", "image/gif"],
        }
    }
    resolver = fake_mime_resolver({"/tmp/a": "image/jpeg", "/tmp/b": "text/plain"})
    validator = FileUploadValidator("photos", files, mime_resolver=resolver)
    validator.add_allowed_file_type("image")
    validator.add_allowed_file_extension("jpg")

    outcome = validator.is_valid()
    # The second file fails the type check, so the extension check never runs
    assert outcome.reason == "invalid file type."
    assert resolver.calls == ["/tmp/a", "/tmp/b"]


def test_multi_file_extension_failure_on_second_file():
    files = {"photos": {"error": [0, 0], "name": ["a.jpg", "b.gif"], "tmp_name": ["/tmp/a", "/tmp/b"]}}
    validator = FileUploadValidator("photos", files).add_allowed_file_extension("jpg")
    assert validator.is_valid().reason == "invalid file extension."


# ---------------------------------------------------------------------------
# Accessors delegated to the field
# ---------------------------------------------------------------------------


def test_validator_exposes_field_data():
    files = {"photos": {"error": [0, 0], "name": ["a.jpg", "b.jpg"], "tmp_name": ["/tmp/a", "/tmp/b"], "size": [3, "4"]}}
    validator = FileUploadValidator("photos", files)

    assert validator.has_upload() is True
    assert validator.is_multiple() is True
    assert validator.name == ["a.jpg", "b.jpg"]
    assert validator.size == [3, 4]
    records = validator.get_file_data()
    assert [r.name for r in records] == ["a.jpg", "b.jpg"]
    assert all(isinstance(r, FileRecord) for r in records)


def test_outcome_truthiness():
    assert FileUploadValidator("avatar", _single()).is_valid()
    assert not FileUploadValidator("avatar", {}).is_valid()


@pytest.mark.parametrize(
    "filename, expected",
    [
        ("me.PNG", "png"),
        ("archive.tar.gz", "gz"),
        ("noext", ""),
        ("trailing.", ""),
        (".htaccess", "htaccess"),
        ("C:\\Users\\me\\doc.PDF", "pdf"),
        ("", ""),
    ],
)
def test_file_extension(filename, expected):
    assert file_extension(filename) == expected


@pytest.mark.parametrize("code, expected", [(3.0, False), ("3.0", False), (3.5, True), ("7", False)])
def test_integral_float_and_string_codes(code, expected):
    outcome = FileUploadValidator("avatar", _single(error=code)).is_valid()
    assert (outcome.reason == REASON_UNKNOWN_ERROR) is expected


def test_non_finite_code_keeps_file_data():
    record = FileUploadValidator("avatar", _single(error=float("inf"))).get_file_data()
    assert record.error == "inf"
