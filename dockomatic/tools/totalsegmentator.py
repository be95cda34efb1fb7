"""Tool wrapper for TotalSegmentator."""

from __future__ import annotations

from dataclasses import dataclass, field

from dockomatic.data import NAME, DataItem, clear_input_location
from dockomatic.helper import FLAG_ONLY, DockerHelper
from dockomatic.paths import has_extension, strip_extension

from .base import Tool

_STRUCTURES = [
    "adrenal_gland_left", "adrenal_gland_right", "aorta",
    "autochthon_left", "autochthon_right", "brain",
    "clavicula_left", "clavicula_right", "colon", "duodenum", "esophagus",
    "face", "femur_left", "femur_right", "gallbladder",
    "gluteus_maximus_left", "gluteus_maximus_right",
    "gluteus_medius_left", "gluteus_medius_right",
    "gluteus_minimus_left", "gluteus_minimus_right",
    "heart_atrium_left", "heart_atrium_right", "heart_myocardium",
    "heart_ventricle_left", "heart_ventricle_right",
    "hip_left", "hip_right", "humerus_left", "humerus_right",
    "iliac_artery_left", "iliac_artery_right",
    "iliac_vena_left", "iliac_vena_right",
    "iliopsoas_left", "iliopsoas_right", "inferior_vena_cava",
    "kidney_left", "kidney_right", "liver",
    "lung_lower_lobe_left", "lung_lower_lobe_right", "lung_middle_lobe_right",
    "lung_upper_lobe_left", "lung_upper_lobe_right",
    "pancreas", "portal_vein_and_splenic_vein", "pulmonary_artery",
    *(f"rib_{side}_{n}" for side in ("left", "right") for n in range(1, 13)),
    "sacrum", "scapula_left", "scapula_right", "small_bowel", "spleen",
    "stomach", "trachea", "urinary_bladder",
    *(f"vertebrae_C{n}" for n in range(1, 8)),
    *(f"vertebrae_L{n}" for n in range(1, 6)),
    *(f"vertebrae_T{n}" for n in range(1, 13)),
]

#: Per-structure masks written by TotalSegmentator 2.0 in non-multilabel mode.
RESULT_FILES = [f"{name}.nii.gz" for name in _STRUCTURES]


@dataclass
class TotalSegmentatorConfig:
    """Configuration for TotalSegmentator container execution."""

    image: str = "wasserth/totalsegmentator:2.0.0"
    device: str | None = "device=0"
    multilabel: bool = False
    fast: bool = False
    roi_subset: str | None = None
    statistics: bool = False
    radiomics: bool = False
    preview: bool = False
    expected_files: list[str] = field(default_factory=lambda: list(RESULT_FILES))


class TotalSegmentatorTool(Tool):
    """Segment anatomical structures in a CT volume."""

    def __init__(self, cfg: TotalSegmentatorConfig, image: DataItem):
        """Store the configuration and the volume to segment."""
        self.cfg = cfg
        self.image = cfg.image
        self.volume = image

    def configure(self, helper: DockerHelper) -> None:  # type: ignore[override]
        """Register TotalSegmentator's arguments on *helper*."""
        cfg = self.cfg
        if cfg.device:
            helper.add_run_argument("--gpus", cfg.device)
        helper.add_run_argument("--ipc=host")
        helper.add_application_argument("TotalSegmentator")

        if cfg.multilabel:
            helper.add_auto_load_output("-o", "results.nii")
            helper.add_application_argument("--ml")
        else:
            helper.add_auto_load_output_folder("-o", "results", cfg.expected_files)

        if cfg.fast:
            helper.add_application_argument("--fast")
        if cfg.roi_subset:
            helper.add_application_argument("--roi_subset", cfg.roi_subset)

        helper.add_auto_save_data(self.volume, "-i", "input_image", ".nii.gz")

        if cfg.statistics:
            helper.add_load_later_output("--statistics", "statistics.json", FLAG_ONLY)
        if cfg.radiomics:
            helper.add_load_later_output("--radiomics", "statistics_radiomics.json", FLAG_ONLY)
        if cfg.preview:
            helper.add_auto_load_output("--preview", "preview.png", FLAG_ONLY)

        helper.enable_auto_remove_container(True)

    def collect(self, results: list[DataItem]) -> list[DataItem]:
        """Name each result after its mask file and drop its provenance.

        The files live in the session's working directory, which is gone
        once the helper closes.
        """
        for item in results:
            location = clear_input_location(item)
            if location is None:
                continue
            if self.cfg.multilabel and has_extension(location, ".nii"):
                item.properties[NAME] = "TotalSegmentator_multilabel"
            else:
                item.properties[NAME] = strip_extension(location, ".nii.gz")
        return results
