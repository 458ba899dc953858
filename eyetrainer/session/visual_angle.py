from __future__ import annotations
import math

CM_PER_INCH = 2.54


def pixels_to_cm(pixel_offset: float, screen_ppi: float) -> float:
    """Physical length on screen of |pixel_offset| px."""
    return abs(pixel_offset) / float(screen_ppi) * CM_PER_INCH


def calculate_visual_angle(
    pixel_offset: float, viewing_distance_cm: float, screen_ppi: float
) -> float:
    """Visual angle in degrees subtended at the eye by a pixel offset.

    Always non-negative; the sign of the offset is the caller's business.
    """
    distance_cm = pixels_to_cm(pixel_offset, screen_ppi)
    return math.degrees(2.0 * math.atan(distance_cm / (2.0 * viewing_distance_cm)))


def format_eccentricity(
    pixel_offset: float, viewing_distance_cm: float, screen_ppi: float
) -> str:
    """Live readout text, e.g. 'Current eccentricity: -4.4°'."""
    degrees = calculate_visual_angle(pixel_offset, viewing_distance_cm, screen_ppi)
    sign = "+" if pixel_offset >= 0 else "-"
    return f"Current eccentricity: {sign}{degrees:.1f}°"
