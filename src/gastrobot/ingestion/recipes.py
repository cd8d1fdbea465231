"""Heuristic recipe extraction from video descriptions."""

from gastrobot.models import Recipe, Video

RECIPE_TAGS = ["gastronogeek", "cooking"]

_INGREDIENT_HEADERS = ("ingredient", "ingrédient")
_INSTRUCTION_HEADERS = ("instruction", "step", "étape")


def extract_recipe(video: Video) -> Recipe | None:
    """Split a description into ingredient and instruction lines.

    A line mentioning an ingredients header starts the ingredient
    section; one mentioning instructions/steps starts the instruction
    section. Lines before any header are ignored. Returns None when
    neither section has content.
    """
    if not video.description:
        return None

    ingredients: list[str] = []
    instructions: list[str] = []
    section = None

    for line in video.description.splitlines():
        line = line.strip()
        if not line:
            continue
        lowered = line.lower()
        if any(header in lowered for header in _INGREDIENT_HEADERS):
            section = ingredients
            continue
        if any(header in lowered for header in _INSTRUCTION_HEADERS):
            section = instructions
            continue
        if section is not None:
            section.append(line)

    if not ingredients and not instructions:
        return None

    return Recipe(
        video_id=video.video_id,
        title=video.title,
        description=video.description,
        ingredients=ingredients,
        instructions=instructions,
        tags=list(RECIPE_TAGS),
    )
