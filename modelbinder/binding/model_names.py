"""Helpers for building the keys binders look up in value providers."""


def create_index_model_name(parent_name: str, index: object) -> str:
    """`people` + `0` -> `people[0]`; an empty parent gives `[0]`."""
    if not parent_name:
        return f"[{index}]"
    return f"{parent_name}[{index}]"


def create_property_model_name(prefix: str, property_name: str) -> str:
    """`people[0]` + `name` -> `people[0].name`; an empty prefix gives the bare name."""
    if not prefix:
        return property_name or ""
    if not property_name:
        return prefix
    if property_name.startswith("["):
        return prefix + property_name
    return f"{prefix}.{property_name}"
