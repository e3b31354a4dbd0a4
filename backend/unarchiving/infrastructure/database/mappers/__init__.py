from .unarchiving_record_mapper import (
    PROCESS_NUMBER_PLACEHOLDER,
    apply_to_model,
    entity_to_model,
    model_to_entity,
)

__all__ = [
    "PROCESS_NUMBER_PLACEHOLDER",
    "apply_to_model",
    "entity_to_model",
    "model_to_entity",
]
