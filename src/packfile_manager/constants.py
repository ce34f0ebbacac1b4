from typing import TypedDict

DB_FOLDER = "db"
LOC_EXTENSION = ".loc"

TEXT_EXTENSIONS = frozenset(
    {
        ".txt",
        ".xml",
        ".lua",
        ".csv",
        ".tsv",
        ".json",
        ".battle_script",
        ".material",
        ".variantmeshdefinition",
        ".environment",
    }
)

IMAGE_EXTENSIONS = frozenset({".png", ".jpg", ".jpeg", ".tga", ".dds"})


class GameRegistryEntry(TypedDict):
    display_name: str
    pfh_version: str


GAME_REGISTRY: dict[str, GameRegistryEntry] = {
    "warhammer_2": {
        "display_name": "Warhammer 2",
        "pfh_version": "PFH5",
    },
    "warhammer": {
        "display_name": "Warhammer",
        "pfh_version": "PFH4",
    },
    "thrones_of_britannia": {
        "display_name": "Thrones of Britannia",
        "pfh_version": "PFH4",
    },
    "attila": {
        "display_name": "Attila",
        "pfh_version": "PFH4",
    },
    "rome_2": {
        "display_name": "Rome 2",
        "pfh_version": "PFH4",
    },
    "shogun_2": {
        "display_name": "Shogun 2",
        "pfh_version": "PFH3",
    },
    "napoleon": {
        "display_name": "Napoleon",
        "pfh_version": "PFH0",
    },
    "empire": {
        "display_name": "Empire",
        "pfh_version": "PFH0",
    },
}
