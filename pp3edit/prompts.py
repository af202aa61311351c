from typing import Optional

from pp3edit.ranges import (
    COLOR_TONING_RANGES,
    COMMON_PARAMETER_RANGES,
    TECHNICAL_PARAMETER_RANGES,
    format_ranges,
)

DEFAULT_PRESET = "aggressive"

_KEY_RULES = """Key Rules:
1. Only modify existing parameter values
2. Keep original section order and parameter order
3. {approach}
4. Only include parameters you want to change"""

_OUTPUT_RULES = """[Additional changes following these rules]
- Only include parameters you want to change
- Never change section headers
- Include only the sections that need changes

Current pp3 to transform:"""

_COLOR_TONING_EXAMPLE = """Example with another section:
```
[ColorToning]
Redlow={redlow}
```
"""


def _build_preset(role: str, mission: str, mandate: str, approach: str, ranges: str,
                  analysis: str, plan: str, example: str, extra_example: str = "") -> str:
    return f"""You are a RawTherapee processing profile (pp3) optimization {role}. {mission} A JPEG preview is provided - {mandate[0]}

ARTISTIC MANDATE:
{mandate[1]}

{_KEY_RULES.format(approach=approach)}

Common Parameter Value Ranges:
{ranges}

Output Format:

ANALYSIS:
- {analysis}

PLAN:
- {plan}

EXECUTION:

```
{example}
```

{extra_example}
{_OUTPUT_RULES}
"""


AGGRESSIVE_PROMPT = _build_preset(
    role="MASTER",
    mission="Your mission is to aggressively optimize and creatively transform the attached pp3 file.",
    mandate=(
        "use it as inspiration for bold enhancements, not limitation.",
        "- Push creative boundaries while maintaining technical excellence\n"
        "- Prioritize dramatic yet balanced results over safe adjustments\n"
        "- Seek hidden potential in every parameter",
    ),
    approach="Make bold, creative enhancements",
    ranges=format_ranges(COMMON_PARAMETER_RANGES),
    analysis="Current issues and creative opportunities",
    plan="Coordinated parameter changes with expected impact",
    example="[Exposure]\nClip=0.15\nCompensation=-0.7",
)

CREATIVE_PROMPT = _build_preset(
    role="ARTIST",
    mission="Your mission is to creatively transform the attached pp3 file with artistic vision.",
    mandate=(
        "use it as a starting point for your artistic interpretation.",
        "- Prioritize artistic expression and unique visual style\n"
        "- Create a distinctive mood or atmosphere in the image\n"
        "- Experiment with color relationships and tonal contrasts",
    ),
    approach="Focus on creative color grading and mood enhancement",
    ranges=format_ranges(COMMON_PARAMETER_RANGES) + "\n\n" + format_ranges(COLOR_TONING_RANGES),
    analysis="Artistic opportunities and potential visual directions",
    plan="Creative vision and mood you're aiming to create",
    example="[Exposure]\nClip=0.15\nCompensation=-0.7",
    extra_example=_COLOR_TONING_EXAMPLE.format(redlow=20),
)

BALANCED_PROMPT = _build_preset(
    role="EXPERT",
    mission="Your mission is to carefully enhance the attached pp3 file with balanced, natural-looking adjustments.",
    mandate=(
        "use it to guide your subtle improvements.",
        "- Prioritize natural, realistic results with subtle enhancements\n"
        "- Maintain proper color accuracy and tonal balance\n"
        "- Enhance image quality while preserving the original intent",
    ),
    approach="Make measured, balanced adjustments",
    ranges=format_ranges(COMMON_PARAMETER_RANGES) + "\n\n" + format_ranges(COLOR_TONING_RANGES),
    analysis="Technical issues and opportunities for improvement",
    plan="Balanced parameter changes with expected impact",
    example="[Exposure]\nClip=0.05\nCompensation=-0.2",
    extra_example=_COLOR_TONING_EXAMPLE.format(redlow=10),
)

TECHNICAL_PROMPT = _build_preset(
    role="TECHNICIAN",
    mission="Your mission is to technically optimize the attached pp3 file with precision and accuracy.",
    mandate=(
        "use it to identify technical issues to address.",
        "- Prioritize technical excellence and image fidelity\n"
        "- Focus on noise reduction, sharpness, and detail preservation\n"
        "- Correct technical flaws while maintaining a neutral look",
    ),
    approach="Make precise technical adjustments",
    ranges=format_ranges(COMMON_PARAMETER_RANGES) + "\n\n" + format_ranges(TECHNICAL_PARAMETER_RANGES),
    analysis="Technical issues and image quality problems",
    plan="Technical corrections with expected improvements",
    example="[Exposure]\nCompensation=-0.1",
)

PROMPTS = {
    "aggressive": AGGRESSIVE_PROMPT,
    "creative": CREATIVE_PROMPT,
    "balanced": BALANCED_PROMPT,
    "technical": TECHNICAL_PROMPT,
}

EVALUATION_PROMPT = """You are an expert photography and image processing evaluator. Your task is to analyze multiple processed versions of the same RAW image and determine which one is the best overall result.

EVALUATION CRITERIA:
1. **Technical Quality**: Exposure, contrast, color accuracy, noise levels, sharpness
2. **Artistic Merit**: Visual appeal, mood, creative interpretation
3. **Processing Balance**: Avoiding over-processing while maximizing image potential
4. **Detail Preservation**: Maintaining important details in highlights and shadows

INSTRUCTIONS:
- You will be shown multiple processed versions of the same image
- Each image is labeled with its generation number (e.g., "Generation 1", "Generation 2", etc.)
- Analyze each image carefully for the criteria above
- Choose the BEST overall result
- Provide a clear, detailed explanation of your choice

OUTPUT FORMAT:

ANALYSIS:
[Detailed analysis of each generation's strengths and weaknesses]

REASONING:
[Clear explanation of why the chosen generation is the best, referencing specific visual qualities and technical aspects]

BEST_GENERATION: [number]

Please evaluate the following processed images:"""


def build_evaluation_prompt(count: int) -> str:
    """Evaluation instructions followed by one 'Generation N:' label per image, 1-based."""
    labels = "\n".join(f"Generation {n}:" for n in range(1, count + 1))
    return f"{EVALUATION_PROMPT}\n\n{labels}"


def get_prompt_by_preset(preset: str = DEFAULT_PRESET) -> str:
    """Case-insensitive preset lookup. Unknown names get the aggressive prompt."""
    return PROMPTS.get(preset.lower(), AGGRESSIVE_PROMPT)


def build_generation_prompt(
    included_text: str, preset: str = DEFAULT_PRESET, prompt: Optional[str] = None, extra_context: Optional[str] = None
) -> str:
    """
    Prompt text sent with the preview image: instructions, then the sections to edit.
    extra_context (e.g. histogram statistics) is appended last.
    """
    text = f"{prompt or get_prompt_by_preset(preset)}\n\n{included_text}"
    if extra_context:
        text = f"{text}\n\n{extra_context}"
    return text
