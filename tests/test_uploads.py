"""Tests for bracket-notation form parsing and upload validation."""
import pytest

from sitecms.domain.errors import UploadRejectedError
from sitecms.uploads.form_parser import ParsedForm, parse_bracket_fields
from sitecms.uploads.validation import DOCUMENTS, IMAGES, classify, validate_uploads


class TestParseBracketFields:
    """Test reconstruction of nested fields."""

    def test_plain_fields(self):
        """Test plain keys map to strings."""
        assert parse_bracket_fields([("title", "Hello"), ("price", "$10")]) == {"title": "Hello", "price": "$10"}

    def test_indexed_entries_are_ordered_by_index(self):
        """Test list order follows indices, not arrival."""
        pairs = [("features[1]", "Secure"), ("features[0]", "Fast"), ("features[10]", "Last")]

        assert parse_bracket_fields(pairs) == {"features": ["Fast", "Secure", "Last"]}

    def test_blank_list_items_are_dropped(self):
        """Test blank items vanish and values are stripped."""
        pairs = [("tags[0]", " web "), ("tags[1]", "  "), ("tags[2]", "api")]

        assert parse_bracket_fields(pairs) == {"tags": ["web", "api"]}

    def test_empty_append_key_clears_list(self):
        """Test a lone field[]= becomes an empty list."""
        assert parse_bracket_fields([("images[]", "")]) == {"images": []}

    def test_append_keys_accumulate(self):
        """Test field[] entries append in order."""
        assert parse_bracket_fields([("skills[]", "Go"), ("skills[]", "SQL")]) == {"skills": ["Go", "SQL"]}

    def test_named_keys_build_a_mapping(self):
        """Test field[key] entries become a dict, keeping empty values."""
        pairs = [("socialLinks[github]", "gh"), ("socialLinks[twitter]", "")]

        assert parse_bracket_fields(pairs) == {"socialLinks": {"github": "gh", "twitter": ""}}

    def test_numeric_keys_mixed_with_named_keys(self):
        """Test numeric sub-keys become string keys of a mapping."""
        pairs = [("metadata[cta]", "Go"), ("metadata[2]", "two")]

        assert parse_bracket_fields(pairs) == {"metadata": {"cta": "Go", "2": "two"}}

    def test_repeated_plain_keys_become_a_list(self):
        """Test repeated plain keys are collected."""
        assert parse_bracket_fields([("tag", "a"), ("tag", "b")]) == {"tag": ["a", "b"]}

    def test_parsed_form_file_helpers(self, upload_factory):
        """Test the file accessors of ParsedForm."""
        form = ParsedForm(files={"images": [upload_factory(), upload_factory("b.png")]})

        assert form.file_count == 2
        assert len(form.files_for("images")) == 2
        assert form.files_for("documents") == []


class TestClassify:
    """Test file type rules."""

    def test_image(self, upload_factory):
        """Test images go to the images folder."""
        assert classify(upload_factory("a.JPG", "image/jpeg")) == IMAGES

    def test_document_when_allowed(self, upload_factory):
        """Test documents go to the documents folder when accepted."""
        assert classify(upload_factory("cv.pdf", "application/pdf"), allow_documents=True) == DOCUMENTS

    def test_document_when_not_allowed(self, upload_factory):
        """Test documents are rejected on image-only resources."""
        with pytest.raises(UploadRejectedError) as exc_info:
            classify(upload_factory("cv.pdf", "application/pdf"), allow_documents=False)

        assert exc_info.value.code == "INVALID_FILE_TYPE"

    def test_extension_must_match_type(self, upload_factory):
        """Test an image MIME type with a foreign extension is rejected."""
        with pytest.raises(UploadRejectedError, match="Invalid file type"):
            classify(upload_factory("script.exe", "image/png"))


class TestValidateUploads:
    """Test count, size and field rules."""

    def test_accepted_uploads_are_paired_with_folders(self, upload_factory):
        """Test valid uploads come back with their target folder."""
        image = upload_factory()
        document = upload_factory("spec.docx", "application/vnd.openxmlformats-officedocument.wordprocessingml.document")

        checked = validate_uploads({"images": [image, document]}, ["images"], allow_documents=True)

        assert checked == [(image, IMAGES), (document, DOCUMENTS)]

    def test_unexpected_field(self, upload_factory):
        """Test files under an unknown key are rejected."""
        with pytest.raises(UploadRejectedError) as exc_info:
            validate_uploads({"avatar": [upload_factory()]}, ["images"])

        assert exc_info.value.code == "UNEXPECTED_FILE_FIELD"

    def test_too_many_files(self, upload_factory):
        """Test the per-field file limit."""
        files = {"images": [upload_factory(f"{i}.png") for i in range(6)]}

        with pytest.raises(UploadRejectedError, match="Too many files. Maximum 5 files allowed.") as exc_info:
            validate_uploads(files, ["images"], max_files=5)

        assert exc_info.value.code == "TOO_MANY_FILES"

    def test_file_too_large(self, upload_factory):
        """Test the per-file size limit."""
        big = upload_factory(data=b"x" * (1024 * 1024 + 1))

        with pytest.raises(UploadRejectedError, match="Maximum size allowed is 1MB") as exc_info:
            validate_uploads({"images": [big]}, ["images"], max_size_mb=1)

        assert exc_info.value.code == "FILE_TOO_LARGE"

    def test_no_files(self):
        """Test an empty upload set is valid."""
        assert validate_uploads({}, ["images"]) == []
