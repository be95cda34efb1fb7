from structlog.testing import capture_logs

from dockomatic.entries import LoadEntry
from dockomatic.errors import MissingOutput
from dockomatic.results import load_results

from .utils import RecordingCodec


def test_directory_loads_only_existing_members(tmp_path):
    """Verify directory outputs load exactly the expected files present."""
    results = tmp_path / "results"
    results.mkdir()
    (results / "liver.nii.gz").write_bytes(b"liver")
    (results / "spleen.nii.gz").write_bytes(b"spleen")
    (results / "unexpected.nii.gz").write_bytes(b"?")
    codec = RecordingCodec()
    entry = LoadEntry(
        "-o", "results", True, False, True,
        ["aorta.nii.gz", "liver.nii.gz", "spleen.nii.gz", "brain.nii.gz"],
    )

    res = load_results(tmp_path, [entry], codec)

    assert [i.payload for i in res.items] == [b"liver", b"spleen"]
    assert codec.loaded == [results / "liver.nii.gz", results / "spleen.nii.gz"]
    assert res.missing == []
    assert not (results / "aorta.nii.gz").exists()
    assert not (results / "brain.nii.gz").exists()


def test_missing_single_file_is_soft(tmp_path):
    """Verify an absent single file output is logged and recorded."""
    (tmp_path / "present.png").write_bytes(b"png")
    entries = [
        LoadEntry("--preview", "preview.png", True, True),
        LoadEntry("--image", "present.png", True),
    ]
    with capture_logs() as logs:
        res = load_results(tmp_path, entries, RecordingCodec())

    assert [i.payload for i in res.items] == [b"png"]
    assert res.missing == [MissingOutput("--preview", tmp_path / "preview.png")]
    assert any(e["event"] == "results.missing" and e["log_level"] == "warning" for e in logs)


def test_load_later_outputs_are_never_loaded(tmp_path):
    """Verify outputs registered without auto-load stay on disk only."""
    (tmp_path / "statistics.json").write_text("{}")
    codec = RecordingCodec()
    res = load_results(tmp_path, [LoadEntry("--statistics", "statistics.json", False, True)], codec)
    assert res.items == []
    assert codec.loaded == []


def test_working_directory_files_come_first(tmp_path):
    """Verify working-directory files load before entries and absent ones are skipped."""
    (tmp_path / "log.txt").write_text("log")
    (tmp_path / "out.png").write_bytes(b"png")
    codec = RecordingCodec()
    res = load_results(
        tmp_path,
        [LoadEntry("--out", "out.png", True)],
        codec,
        working_dir_files=["missing.txt", "log.txt"],
    )
    assert [i.payload for i in res.items] == [b"log", b"png"]
    assert res.missing == []
