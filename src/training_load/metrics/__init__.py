"""Training metrics calculations."""

from .zones import (
    Zone,
    calculate_hr_reserve_zones,
    calculate_hr_zones,
    calculate_power_zones,
    calculate_pace_zones,
    calculate_swim_zones,
    calculate_time_in_zones,
    compute_zones,
    get_zone_for_value,
)
from .tss import (
    TssMethod,
    TssResult,
    calculate_intensity_factor,
    calculate_normalized_power,
    calculate_variability_index,
    calculate_power_tss,
    calculate_pace_tss,
    calculate_hr_tss,
    calculate_duration_tss,
    calculate_session_tss,
)
from .fitness import (
    ATL_TIME_CONSTANT,
    CTL_TIME_CONSTANT,
    PMCPoint,
    build_pmc,
    determine_fitness_level,
    determine_form,
    get_training_recommendation,
    materialize_daily_loads,
    recompute_from,
    update_load,
)
from .projection import (
    ProjectionPoint,
    RequiredLoadPlan,
    TaperPlan,
    calculate_required_weekly_tss,
    forecast_weekly_plan,
    project_pmc,
    simulate_taper,
)
from .swim import CssResult, calculate_css
from .efficiency import (
    DecouplingResult,
    EFPoint,
    EFTrend,
    calculate_aerobic_decoupling,
    calculate_ef_trend,
    calculate_efficiency_factor,
    session_efficiency_factor,
)

__all__ = [
    # Zones
    "Zone",
    "calculate_hr_reserve_zones",
    "calculate_hr_zones",
    "calculate_power_zones",
    "calculate_pace_zones",
    "calculate_swim_zones",
    "calculate_time_in_zones",
    "compute_zones",
    "get_zone_for_value",
    # TSS
    "TssMethod",
    "TssResult",
    "calculate_intensity_factor",
    "calculate_normalized_power",
    "calculate_variability_index",
    "calculate_power_tss",
    "calculate_pace_tss",
    "calculate_hr_tss",
    "calculate_duration_tss",
    "calculate_session_tss",
    # Performance Management Chart
    "ATL_TIME_CONSTANT",
    "CTL_TIME_CONSTANT",
    "PMCPoint",
    "build_pmc",
    "determine_fitness_level",
    "determine_form",
    "get_training_recommendation",
    "materialize_daily_loads",
    "recompute_from",
    "update_load",
    # Projection
    "ProjectionPoint",
    "RequiredLoadPlan",
    "TaperPlan",
    "calculate_required_weekly_tss",
    "forecast_weekly_plan",
    "project_pmc",
    "simulate_taper",
    # Swim
    "CssResult",
    "calculate_css",
    # Efficiency
    "DecouplingResult",
    "EFPoint",
    "EFTrend",
    "calculate_aerobic_decoupling",
    "calculate_ef_trend",
    "calculate_efficiency_factor",
    "session_efficiency_factor",
]
