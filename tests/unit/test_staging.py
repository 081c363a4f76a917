"""Unit tests for the staging store."""

import json

import pytest

from space_migrator.core.staging import StagingStore, to_json
from space_migrator.exceptions import StagingError
from tests.unit.conftest import make_channel_record, make_message


class TestStagingWrites:
    """Tests for writing staged data."""

    def test_create_channel_slot_writes_channel_json_immediately(self, tmp_path):
        store = StagingStore(tmp_path / "staging")
        record = make_channel_record("abc", "eng-backend")

        slot = store.create_channel_slot(record)

        assert slot == tmp_path / "staging" / "abc"
        assert json.loads((slot / "channel.json").read_text()) == record
        assert not (slot / "messages.json").exists()

    def test_write_messages_is_pretty_printed_and_unicode(self, tmp_path):
        store = StagingStore(tmp_path)
        messages = [make_message(text="Grüße")]

        store.write_messages("abc", messages)

        raw = (tmp_path / "abc" / "messages.json").read_text(encoding="utf-8")
        assert "Grüße" in raw
        assert raw.startswith("[\n    {")
        assert json.loads(raw) == messages

    def test_to_json_indent(self):
        assert to_json({"a": 1}) == '{\n    "a": 1\n}\n'

    def test_wipe_removes_root(self, tmp_path):
        root = tmp_path / "staging"
        (root / "abc").mkdir(parents=True)
        (root / "abc" / "channel.json").write_text("{}")

        StagingStore(root).wipe()

        assert not root.exists()

    def test_wipe_missing_root_is_noop(self, tmp_path):
        StagingStore(tmp_path / "missing").wipe()


class TestManifest:
    """Tests for manifest versioning."""

    def test_round_trip(self, tmp_path):
        store = StagingStore(tmp_path / "staging")
        store.write_manifest()

        manifest = json.loads((tmp_path / "staging" / "manifest.json").read_text())
        assert manifest["schema_version"] == 1
        assert "exported_at" in manifest
        store.check_manifest()

    def test_missing_root_raises(self, tmp_path):
        with pytest.raises(StagingError, match="does not exist"):
            StagingStore(tmp_path / "missing").check_manifest()

    def test_missing_manifest_is_tolerated(self, tmp_path):
        StagingStore(tmp_path).check_manifest()

    def test_version_mismatch_raises(self, tmp_path):
        (tmp_path / "manifest.json").write_text(json.dumps({"schema_version": 99}))

        with pytest.raises(StagingError, match="re-run the export"):
            StagingStore(tmp_path).check_manifest()

    def test_corrupt_manifest_raises(self, tmp_path):
        (tmp_path / "manifest.json").write_text("{not json")

        with pytest.raises(StagingError):
            StagingStore(tmp_path).check_manifest()


class TestStagingReads:
    """Tests for reading staged data."""

    def test_iter_channels_in_directory_order(self, staging_dir):
        store = StagingStore(staging_dir)

        names = [record["name"] for record in store.iter_channels()]

        assert store.channel_ids() == ["ch1", "ch2", "ch3"]
        assert names == ["eng-general", "eng-backend", "random"]

    def test_directories_without_channel_json_are_ignored(self, staging_dir):
        (staging_dir / "stray").mkdir()

        assert "stray" not in StagingStore(staging_dir).channel_ids()

    def test_load_messages_preserves_order(self, staging_dir):
        messages = StagingStore(staging_dir).load_messages("ch2")

        assert [m["text"] for m in messages] == ["first", "", "third"]

    def test_missing_messages_file_yields_empty_list(self, staging_dir):
        (staging_dir / "ch3" / "messages.json").unlink()

        assert StagingStore(staging_dir).load_messages("ch3") == []

    def test_invalid_channel_record_raises(self, tmp_path):
        (tmp_path / "bad").mkdir()
        (tmp_path / "bad" / "channel.json").write_text(json.dumps(["not", "a", "dict"]))

        with pytest.raises(StagingError):
            StagingStore(tmp_path).load_channel("bad")

    def test_channel_ids_of_missing_root(self, tmp_path):
        assert StagingStore(tmp_path / "missing").channel_ids() == []
