"""
Roof engineering: realistic panel counts after setbacks, obstructions and spacing.

Roof-imagery providers report how many panels fit on the raw roof surface. Fire
code setbacks, vents and inter-row shading spacing cut that number down; this
module estimates by how much.
"""

import math
from dataclasses import dataclass, replace
from typing import Optional

from .errors import InvalidInputError


@dataclass(frozen=True)
class PanelDimensions:
    """Physical size and rating of one module."""
    length_inches: float
    width_inches: float
    watts: float

    @property
    def length_feet(self) -> float:
        return self.length_inches / 12

    @property
    def width_feet(self) -> float:
        return self.width_inches / 12

    @property
    def length_meters(self) -> float:
        return self.length_inches * 0.0254

    @property
    def width_meters(self) -> float:
        return self.width_inches * 0.0254

    @property
    def area_square_feet(self) -> float:
        return self.length_inches * self.width_inches / 144

    @property
    def area_square_meters(self) -> float:
        return self.length_inches * self.width_inches * 0.00064516


@dataclass(frozen=True)
class RoofSetbacks:
    """Clearances required around the array, in feet."""
    fire_setback_feet: float
    edge_setback_feet: float
    obstruction_setback_feet: float
    walkway_width_feet: float


@dataclass(frozen=True)
class PanelSpacing:
    """Gaps between rows and columns of panels."""
    row_spacing_feet: float
    column_spacing_feet: float
    tilt_degrees: float
    shading_factor_multiplier: float  # Row spacing = panel length x sin(tilt) x this


@dataclass(frozen=True)
class UsableRoofArea:
    total_roof_area_sqft: float
    setback_area_loss_sqft: float
    obstruction_area_loss_sqft: float
    spacing_area_loss_sqft: float
    usable_area_sqft: float
    usable_area_percentage: float


@dataclass(frozen=True)
class EngineeringResult:
    """Engineered panel capacity compared with the roof-imagery estimate."""
    panel_specs: PanelDimensions
    roof_setbacks: RoofSetbacks
    panel_spacing: PanelSpacing
    usable_area: UsableRoofArea
    max_panels_engineered: int
    max_system_size_kw: float
    google_estimate: int
    engineering_reduction: int      # Negative when engineering allows more panels
    engineering_efficiency: float   # Engineered / estimated panel count


# Standard 400W residential module
STANDARD_400W_PANEL = PanelDimensions(length_inches=79, width_inches=39, watts=400)

# NEC 690.31 fire setback plus safety margins; local codes vary
STANDARD_SETBACKS = RoofSetbacks(
    fire_setback_feet=3,
    edge_setback_feet=1,
    obstruction_setback_feet=1,
    walkway_width_feet=3,
)

STANDARD_SPACING = PanelSpacing(
    row_spacing_feet=2,
    column_spacing_feet=0.5,
    tilt_degrees=25,
    shading_factor_multiplier=2.5,
)

OBSTRUCTION_LOSS = 0.10     # Vents, chimneys, skylights
SPACING_LOSS = 0.05         # Inter-panel gaps
LAYOUT_EFFICIENCY = 0.85    # Non-rectangular packing
MIN_TILT_DEGREES = 15
MAX_TILT_DEGREES = 45


def calculate_optimal_spacing(latitude: Optional[float] = None) -> PanelSpacing:
    """
    Panel spacing for a site.

    Tilt follows latitude (clamped to 15-45 degrees) and row spacing grows with
    tilt so one row does not shade the next.

    Args:
        latitude: Site latitude; standard spacing is used when omitted

    Returns:
        PanelSpacing
    """
    if latitude is None:
        return STANDARD_SPACING

    tilt = min(max(latitude, MIN_TILT_DEGREES), MAX_TILT_DEGREES)
    row_spacing = (
        STANDARD_400W_PANEL.length_feet
        * math.sin(math.radians(tilt))
        * STANDARD_SPACING.shading_factor_multiplier
    )
    return replace(STANDARD_SPACING, tilt_degrees=tilt, row_spacing_feet=row_spacing)


def calculate_usable_roof_area(total_roof_area_sqft: float,
                               setbacks: RoofSetbacks = STANDARD_SETBACKS) -> UsableRoofArea:
    """
    Roof area left for panels after setbacks, obstructions and spacing.

    The roof is approximated as a square of side sqrt(area); a band of
    fire + edge setback is removed from every side, then flat percentages for
    obstructions and spacing are taken off what remains.

    Args:
        total_roof_area_sqft: Raw roof area in square feet
        setbacks: Clearances to apply

    Returns:
        UsableRoofArea
    """
    side = math.sqrt(total_roof_area_sqft)
    perimeter_setback = setbacks.fire_setback_feet + setbacks.edge_setback_feet
    usable_side = max(0.0, side - 2 * perimeter_setback)
    area_after_setbacks = usable_side * usable_side

    obstruction_loss = area_after_setbacks * OBSTRUCTION_LOSS
    spacing_loss = area_after_setbacks * SPACING_LOSS
    usable = max(0.0, area_after_setbacks - obstruction_loss - spacing_loss)

    if total_roof_area_sqft > 0:
        percentage = usable / total_roof_area_sqft * 100
    else:
        percentage = 0.0

    return UsableRoofArea(
        total_roof_area_sqft=total_roof_area_sqft,
        setback_area_loss_sqft=total_roof_area_sqft - area_after_setbacks,
        obstruction_area_loss_sqft=obstruction_loss,
        spacing_area_loss_sqft=spacing_loss,
        usable_area_sqft=usable,
        usable_area_percentage=percentage,
    )


def calculate_max_panels_with_spacing(usable_area_sqft: float,
                                      panel_specs: PanelDimensions = STANDARD_400W_PANEL,
                                      spacing: PanelSpacing = STANDARD_SPACING) -> int:
    """Whole panels that fit in the usable area, including their spacing footprint."""
    footprint = (
        (panel_specs.length_feet + spacing.row_spacing_feet)
        * (panel_specs.width_feet + spacing.column_spacing_feet)
    )
    theoretical_max = math.floor(usable_area_sqft / footprint)
    return math.floor(theoretical_max * LAYOUT_EFFICIENCY)


def calculate_engineered_capacity(roof_area_sqft: float,
                                  external_max_panels: int,
                                  latitude: Optional[float] = None) -> EngineeringResult:
    """
    Compare a roof-imagery panel estimate with an engineered layout.

    Args:
        roof_area_sqft: Raw roof area in square feet
        external_max_panels: Panel count reported by the roof-imagery provider
        latitude: Site latitude, used for tilt and row spacing

    Returns:
        EngineeringResult

    Raises:
        InvalidInputError: if the roof area is negative or the provider estimate
            is not a positive panel count
    """
    if roof_area_sqft < 0:
        raise InvalidInputError('roof_area_sqft', "must not be negative")
    if external_max_panels <= 0:
        raise InvalidInputError('external_max_panels', "must be a positive panel count")

    panel_specs = STANDARD_400W_PANEL
    spacing = calculate_optimal_spacing(latitude)
    usable_area = calculate_usable_roof_area(roof_area_sqft, STANDARD_SETBACKS)
    max_panels = calculate_max_panels_with_spacing(usable_area.usable_area_sqft, panel_specs, spacing)

    return EngineeringResult(
        panel_specs=panel_specs,
        roof_setbacks=STANDARD_SETBACKS,
        panel_spacing=spacing,
        usable_area=usable_area,
        max_panels_engineered=max_panels,
        max_system_size_kw=max_panels * panel_specs.watts / 1000,
        google_estimate=external_max_panels,
        engineering_reduction=external_max_panels - max_panels,
        engineering_efficiency=max_panels / external_max_panels,
    )


def generate_engineering_summary(result: EngineeringResult) -> str:
    """Plain-text report of an engineering result."""
    area = result.usable_area
    panel = result.panel_specs
    lines = [
        "ENGINEERING ANALYSIS:",
        f"- Roof imagery estimate: {result.google_estimate} panels",
        f"- Engineered layout: {result.max_panels_engineered} panels "
        f"({result.engineering_efficiency * 100:.1f}% of max)",
        f"- System size: {result.max_system_size_kw:.1f} kW",
        f"- Reduction: {result.engineering_reduction} panels due to setbacks & spacing",
        "",
        "ROOF UTILIZATION:",
        f"- Total roof area: {area.total_roof_area_sqft:.0f} sq ft",
        f"- Usable area: {area.usable_area_sqft:.0f} sq ft ({area.usable_area_percentage:.1f}%)",
        f"- Setback loss: {area.setback_area_loss_sqft:.0f} sq ft",
        f"- Obstruction loss: {area.obstruction_area_loss_sqft:.0f} sq ft",
        "",
        "PANEL SPECIFICATIONS:",
        f"- Panel size: {panel.length_feet:.1f}' x {panel.width_feet:.1f}' ({panel.watts:g}W)",
        f"- Panel area: {panel.area_square_feet:.1f} sq ft each",
        f"- Required setbacks: {result.roof_setbacks.fire_setback_feet:g}' fire code + "
        f"{result.roof_setbacks.edge_setback_feet:g}' safety",
        f"- Row spacing: {result.panel_spacing.row_spacing_feet:.1f}' "
        f"({result.panel_spacing.tilt_degrees:g} deg tilt)",
    ]
    return "\n".join(lines)
