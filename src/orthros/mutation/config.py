"""
Configuration for import mutation and import-block diagnostics.
"""

MUTATION_CONFIG = {
    "implicit_open_module": "Prelude",  # Imported open, never explicitly
    "auto_add_import": True,
}

IMPORT_BLOCK_CONFIG = {
    "import_keyword": "import",  # Line prefix that marks an import line
    "diagnostic_message": "It is possible to reorganise the imports in this file",
}
