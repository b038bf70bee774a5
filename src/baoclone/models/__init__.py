"""
Model registry for Baofeng radios.

Provides a unified layer for model discovery, configuration, and capabilities.
"""

from .registry import (
    ModelConfig,
    ModelId,
    TransferSpan,
    ImageSegment,
    Capability,
    SafetyLevel,
    CapabilityInfo,
    list_models,
    get_model,
    get_model_by_id,
    probe_candidates,
    refine_model,
    detect_image_model,
    get_capabilities,
)

__all__ = [
    "ModelConfig",
    "ModelId",
    "TransferSpan",
    "ImageSegment",
    "Capability",
    "SafetyLevel",
    "CapabilityInfo",
    "list_models",
    "get_model",
    "get_model_by_id",
    "probe_candidates",
    "refine_model",
    "detect_image_model",
    "get_capabilities",
]
