from __future__ import annotations


class AlertActionType:
    """Action identifiers attached to alert notifications for the client to route."""

    VIEW_DETAILS = "view_details"
    ADJUST_THRESHOLD = "adjust_threshold"
    VIEW_ANIMAL = "view_animal"
    ADD_TREATMENT = "add_treatment"
    PLAN_REPRODUCTION = "plan_reproduction"
    VIEW_STATISTICS = "view_statistics"


ALL_ACTIONS = {
    AlertActionType.VIEW_DETAILS,
    AlertActionType.ADJUST_THRESHOLD,
    AlertActionType.VIEW_ANIMAL,
    AlertActionType.ADD_TREATMENT,
    AlertActionType.PLAN_REPRODUCTION,
    AlertActionType.VIEW_STATISTICS,
}
