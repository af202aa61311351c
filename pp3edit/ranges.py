"""
Parameter value ranges quoted to the model when asking for profile edits.
"""

from dataclasses import dataclass
from typing import Dict, List, Optional, Union

Number = Union[int, float]


@dataclass(frozen=True)
class ParameterRange:
    name: str
    low: Number
    high: Number
    description: str

    def contains(self, value: Number) -> bool:
        return self.low <= value <= self.high

    def render(self) -> str:
        return f"- {self.name}: {self.low} to {self.high} ({self.description})"


RangeTable = Dict[str, List[ParameterRange]]

COMMON_PARAMETER_RANGES: RangeTable = {
    "Exposure": [
        ParameterRange("Clip", 0.0, 0.2, "controls highlight clipping"),
        ParameterRange("Compensation", -5.0, 5.0, "exposure adjustment"),
        ParameterRange("Brightness", -100, 100, "overall brightness"),
        ParameterRange("Contrast", -100, 100, "overall contrast"),
        ParameterRange("Saturation", -100, 100, "color intensity"),
        ParameterRange("Black", -16384, 16384, "black point adjustment"),
        ParameterRange("HighlightCompr", 0, 100, "highlight compression"),
        ParameterRange("ShadowCompr", 0, 100, "shadow compression"),
    ],
    "White Balance": [
        ParameterRange("Temperature", 1500, 25000, "color temperature in Kelvin"),
        ParameterRange("Green", 0.2, 2.5, "green-magenta tint"),
    ],
    "Sharpening": [
        ParameterRange("Contrast", 0, 200, "sharpening contrast"),
        ParameterRange("Radius", 0.3, 3.0, "sharpening radius"),
        ParameterRange("Amount", 0, 500, "sharpening strength"),
        ParameterRange("HalocontrolAmount", 0, 100, "halo reduction"),
    ],
    "Vibrance": [
        ParameterRange("Pastels", -100, 100, "pastel colors enhancement"),
        ParameterRange("Saturated", -100, 100, "saturated colors enhancement"),
    ],
    "Dehaze": [
        ParameterRange("Strength", 0, 100, "haze removal intensity"),
        ParameterRange("Depth", 0, 100, "depth of effect"),
        ParameterRange("Saturation", 0, 100, "color saturation in dehazed areas"),
    ],
    "Shadows & Highlights": [
        ParameterRange("Highlights", -100, 100, "highlight recovery"),
        ParameterRange("Shadows", -100, 100, "shadow recovery"),
        ParameterRange("Radius", 0, 100, "effect radius"),
    ],
    "Local Contrast": [
        ParameterRange("Radius", 0, 100, "effect radius"),
        ParameterRange("Amount", 0.0, 2.0, "effect strength"),
        ParameterRange("Darkness", 0.0, 2.0, "dark areas enhancement"),
        ParameterRange("Lightness", 0.0, 2.0, "light areas enhancement"),
    ],
}

COLOR_TONING_RANGES: RangeTable = {
    "ColorToning": [
        ParameterRange("Redlow", -100, 100, "red tones in shadows"),
        ParameterRange("Greenlow", -100, 100, "green tones in shadows"),
        ParameterRange("Bluelow", -100, 100, "blue tones in shadows"),
        ParameterRange("Redhigh", -100, 100, "red tones in highlights"),
        ParameterRange("Greenhigh", -100, 100, "green tones in highlights"),
        ParameterRange("Bluehigh", -100, 100, "blue tones in highlights"),
        ParameterRange("Balance", -100, 100, "balance between shadows and highlights"),
    ],
}

TECHNICAL_PARAMETER_RANGES: RangeTable = {
    "Directional Pyramid Denoising": [
        ParameterRange("Luma", 0, 100, "luminance noise reduction"),
        ParameterRange("Chroma", 0, 100, "color noise reduction"),
        ParameterRange("Gamma", 1.0, 3.0, "gamma adjustment for noise detection"),
        ParameterRange("Passes", 1, 3, "number of denoising passes"),
    ],
    "Impulse Denoising": [
        ParameterRange("Threshold", 0, 100, "threshold for impulse noise detection"),
    ],
    "PostDemosaicSharpening": [
        ParameterRange("Contrast", 0, 200, "contrast enhancement"),
        ParameterRange("DeconvRadius", 0.4, 2.0, "deconvolution radius"),
        ParameterRange("DeconvIterations", 5, 100, "deconvolution iterations"),
    ],
}

ALL_RANGE_TABLES = [COMMON_PARAMETER_RANGES, COLOR_TONING_RANGES, TECHNICAL_PARAMETER_RANGES]


def format_ranges(table: RangeTable) -> str:
    """Renders a table as '[Section]' blocks of '- Name: low to high (description)' lines."""
    blocks = []
    for section, ranges in table.items():
        lines = [f"[{section}]"] + [r.render() for r in ranges]
        blocks.append("\n".join(lines))
    return "\n\n".join(blocks)


def lookup_range(section: str, parameter: str) -> Optional[ParameterRange]:
    for table in ALL_RANGE_TABLES:
        for r in table.get(section, []):
            if r.name == parameter:
                return r
    return None
