from pathlib import Path

from dockomatic.data import DataItem
from dockomatic.entries import SaveEntry, make_set_entry
from dockomatic.staging import stage_entries
from dockomatic.workdir import TempDirectoryProvider

from .utils import RecordingCodec


def _setup(tmp_path):
    provider = TempDirectoryProvider(root=tmp_path / "tmp")
    workdir = provider.allocate()
    return provider, workdir, workdir.name


def test_export_without_provenance(tmp_path):
    """Verify items without a source file are exported once into the workdir."""
    provider, workdir, mount = _setup(tmp_path)
    codec = RecordingCodec()
    item = DataItem(b"volume")
    entry = SaveEntry("--input", "default", ".nrrd", [item])

    res = stage_entries([entry], workdir, mount, codec, provider)

    assert res.mounts == []
    assert res.arguments == ["--input", f"/{mount}/default.nrrd"]
    assert codec.saved == [(item, workdir / "default.nrrd")]
    assert entry.host_path == workdir / "default.nrrd"
    assert (workdir / "default.nrrd").read_bytes() == b"volume"


def test_export_when_extension_differs(tmp_path):
    """Verify a source file in another format is re-exported."""
    provider, workdir, mount = _setup(tmp_path)
    src = tmp_path / "data" / "ct.nii"
    src.parent.mkdir()
    src.write_bytes(b"nii")
    codec = RecordingCodec()
    entry = SaveEntry("-i", "input_image", ".nii.gz", [DataItem.from_file(b"nii", src)])

    res = stage_entries([entry], workdir, mount, codec, provider)

    assert len(codec.saved) == 1
    assert res.arguments == ["-i", f"/{mount}/input_image.nii.gz"]


def test_matching_provenance_mounts_read_only(tmp_path):
    """Verify a source file with the target extension is mounted, not copied."""
    provider, workdir, mount = _setup(tmp_path)
    src = tmp_path / "data" / "sample.imzML"
    src.parent.mkdir()
    src.write_text("imzml")
    codec = RecordingCodec()
    entry = SaveEntry("--imzml", "default", ".imzML", [DataItem.from_file(None, src)])

    res = stage_entries([entry], workdir, mount, codec, provider)

    assert codec.saved == []
    assert entry.mount_name and entry.mount_name != mount
    assert res.mounts == ["-v", f"{src.parent}:/{entry.mount_name}:ro"]
    assert res.arguments == ["--imzml", f"/{entry.mount_name}/sample.imzML"]
    assert entry.host_path == src
    assert entry.mount_source == src.parent
    # the phantom directory used to mint the name is gone again
    assert not (tmp_path / "tmp" / entry.mount_name).exists()


def test_relative_provenance_is_mounted_by_absolute_path(tmp_path, monkeypatch):
    """Verify a relative source path becomes an absolute bind mount."""
    provider, workdir, mount = _setup(tmp_path)
    (tmp_path / "data").mkdir()
    (tmp_path / "data" / "ct.nii.gz").write_bytes(b"ct")
    (tmp_path / "local.nii.gz").write_bytes(b"ct")
    monkeypatch.chdir(tmp_path)
    nested = SaveEntry("-i", "input_image", ".nii.gz", [DataItem.from_file(None, "data/ct.nii.gz")])
    local = SaveEntry("-m", "mask", ".nii.gz", [DataItem.from_file(None, "local.nii.gz")])

    res = stage_entries([nested, local], workdir, mount, RecordingCodec(), provider)

    assert res.mounts == [
        "-v", f"{tmp_path / 'data'}:/{nested.mount_name}:ro",
        "-v", f"{tmp_path}:/{local.mount_name}:ro",
    ]
    assert nested.host_path == tmp_path / "data" / "ct.nii.gz"
    assert nested.host_path.is_absolute()


def test_restaging_is_deterministic(tmp_path):
    """Verify a second staging pass re-uses mount names and paths."""
    provider, workdir, mount = _setup(tmp_path)
    src = tmp_path / "data" / "ct.nii.gz"
    src.parent.mkdir()
    src.write_bytes(b"ct")
    codec = RecordingCodec()
    entries = [
        SaveEntry("-i", "input_image", ".nii.gz", [DataItem.from_file(None, src)]),
        SaveEntry("-m", "mask", ".nrrd", [DataItem(b"mask")]),
    ]

    first = stage_entries(entries, workdir, mount, codec, provider)
    second = stage_entries(entries, workdir, mount, codec, provider)

    assert first == second


def test_set_entry_writes_enumerated_files(tmp_path):
    """Verify a data set is written into its folder and passed as a directory."""
    provider, workdir, mount = _setup(tmp_path)
    codec = RecordingCodec()
    items = [DataItem(b"a"), DataItem(b"b"), DataItem(b"c")]
    entry = make_set_entry("--slices", items, "slices/slice_{}", ".png", auto_save=True)

    res = stage_entries([entry], workdir, mount, codec, provider)

    assert res.arguments == ["--slices", f"/{mount}/slices"]
    assert [p for _, p in codec.saved] == [
        workdir / "slices" / "slice_0.png",
        workdir / "slices" / "slice_1.png",
        workdir / "slices" / "slice_2.png",
    ]
    assert entry.host_paths == [p for _, p in codec.saved]


def test_save_later_only_reserves_paths(tmp_path):
    """Verify save-later entries are not written during staging."""
    provider, workdir, mount = _setup(tmp_path)
    codec = RecordingCodec()
    single = SaveEntry("--table", "table", ".csv", [DataItem(b"t")], auto_save=False)
    many = make_set_entry("--frames", [DataItem(b"1"), DataItem(b"2")], "frames/f_{}", ".npy", auto_save=False)

    res = stage_entries([single, many], workdir, mount, codec, provider)

    assert codec.saved == []
    assert single.host_path == workdir / "table.csv"
    assert many.host_paths == [workdir / "frames" / "f_0.npy", workdir / "frames" / "f_1.npy"]
    assert (workdir / "frames").is_dir()
    assert not Path(workdir / "table.csv").exists()
    assert res.arguments == ["--table", f"/{mount}/table.csv", "--frames", f"/{mount}/frames"]
