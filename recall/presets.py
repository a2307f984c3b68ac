from typing import Dict, List

# Starter sets offered next to manual and generated cards
PRESET_SETS = [
    {
        "id": "set_capitals",
        "title": "European capitals",
        "cards": [
            {"front": "Capital of France", "back": "Paris"},
            {"front": "Capital of Germany", "back": "Berlin"},
            {"front": "Capital of Italy", "back": "Rome"},
            {"front": "Capital of Spain", "back": "Madrid"},
            {"front": "Capital of Portugal", "back": "Lisbon"},
        ],
    },
    {
        "id": "set_neuroscience",
        "title": "Neuroscience concepts",
        "cards": [
            {"front": "Neuroplasticity", "back": "The brain's ability to change and adapt through experience."},
            {"front": "Synapse", "back": "Connection between two neurons that lets impulses pass."},
            {"front": "Hippocampus", "back": "Brain region tied to memory and spatial navigation."},
            {"front": "Dopamine", "back": "Neurotransmitter central to reward and motivation."},
        ],
    },
]


def list_presets() -> List[Dict]:
    return [{"id": p["id"], "title": p["title"], "size": len(p["cards"])} for p in PRESET_SETS]


def preset_pairs(preset_id: str) -> List[Dict[str, str]]:
    for preset in PRESET_SETS:
        if preset["id"] == preset_id:
            return list(preset["cards"])
    raise KeyError(preset_id)
