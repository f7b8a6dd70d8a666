"""Default configuration values for rstedit."""

# File names searched for when no configuration path is given
DEFAULT_CONFIG_FILENAMES: tuple[str, ...] = ("rstedit.yaml", "rstedit.yml", "rstedit.json")

# Environment variable to parser field name mapping
ENV_VAR_MAP: dict[str, str] = {
    "max_nesting_depth": "RSTEDIT_MAX_NESTING_DEPTH",
    "xref_roles": "RSTEDIT_XREF_ROLES",
}

# Keys accepted in configuration files besides the field names
CONFIG_KEY_ALIASES: dict[str, str] = {
    "namesOfConstantsToExpand": "names_of_constants_to_expand",
    "productPhrases": "phrases",
    "titleStyles": "title_styles",
    "codeBlocks": "code_blocks",
}
