# Spectral hybridization module
from .operations import Operation, PhaseMode, apply_operation, combine_phases
from .alignment import target_frame_count, alignment_plan
from .config import ProcessingConfig, WINDOW_SIZES, load_config
from .pipeline import HybridResult, process
