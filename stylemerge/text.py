"""Centralized user-facing text for stylemerge."""

from __future__ import annotations


class Styles:
    ERROR = "red"
    WARNING = "yellow"
    SUCCESS = "green"
    INFO = "dim"
    TITLE = "bold cyan"


class Messages:
    APP_HELP = "stylemerge – merge a tree of Sass/SCSS/CSS imports into one stylesheet."
    HELP_INPUT = "Input stylesheet whose @import tree will be merged."
    HELP_OUTPUT = "Path where the merged stylesheet is written."
    HELP_TARGET = "Syntax of the generated stylesheet (scss or sass)."
    HELP_BINARY = "sass-convert executable used for syntax conversion."
    HELP_OPTIMIZE = "Enable unsafe optimizations (redundant variables, mixins and functions)."
    HELP_WATCH = "Watch imported files and rebuild on change."
    HELP_MANIFEST = "JSON manifest mapping absolute file paths to published URLs."
    HELP_PUBLIC = "Prefix added to URLs resolved through the manifest."
    HELP_POLLING = "Use a polling file watcher (network drives, containers)."
    HELP_VERBOSE = "Print debug logging to stderr."
    HELP_SHOW_CONFIG = "Show current configuration."
    HELP_SET_BINARY = "Set the default sass-convert binary."
    HELP_SET_TARGET = "Set the default target syntax."
    HELP_SET_MAX_OUTPUT = "Set the maximum converter output size in bytes."
    HELP_SET_PUBLIC_PATH = "Set the default public path for manifest URLs."
    HELP_RESET_CONFIG = "Remove all stored configuration values."
    HELP_DOCTOR = "Check the installation and the sass-convert binary."

    ERROR_INPUT_REQUIRED = "Input file path is required."
    ERROR_TARGET_INVALID = "Target must be either `sass` or `scss` (got {value})."
    ERROR_BINARY_MISSING = (
        "Cannot find the `sass-convert` binary. Install it or configure it via "
        "`stylemerge config --set-binary <path>`."
    )
    ERROR_SEQUENCE_INVALID = "{field} should be a list of strings."
    ERROR_PUBLIC_PATH_REQUIRED = (
        "A URL mapping or manifest needs `public_path` to be a string."
    )
    ERROR_CONFIG_JSON_INVALID = "Config payload must be a JSON object."
    ERROR_CONFIG_VALUE_INVALID = "Invalid value for config field `{field}`."
    ERROR_POSITIVE = "{name} must be greater than 0."
    ERROR_UNKNOWN_SYNTAX = "Cannot determine stylesheet syntax of `{path}`."
    ERROR_UNRESOLVED_IMPORT = "Cannot resolve \"{specifier}\" in \"{referrer}\"."
    ERROR_CIRCULAR_IMPORT = "Circular dependency detected:\n{chain}"
    ERROR_MISSING_FROM_GRAPH = "Cannot find \"{path}\" imported from \"{referrer}\"."
    ERROR_CONVERSION_FAILED = "sass-convert failed: {detail}"
    ERROR_CONVERSION_INCOMPLETE = "sass-convert output is missing {path}."
    ERROR_CONVERSION_TIMEOUT = "sass-convert did not finish within {timeout} seconds."
    ERROR_OUTPUT_TOO_LARGE = (
        "sass-convert output is {size} bytes, above the {limit} byte limit."
    )
    ERROR_MANIFEST_UNREADABLE = "Manifest file with files mapping is broken: {path}"
    ERROR_BUILD_IN_PROGRESS = "Only a single build can be running at a time."

    INFO_BUILD_RUNNING = "Building stylesheet..."
    INFO_BUILD_DONE = "Built stylesheet in {took}ms"
    ERROR_BUILD_FAILED = "Build failed after {took}ms"
    INFO_OUTPUT_SAVED = "Merged stylesheet saved to {path}."
    INFO_WATCH_STARTED = "Watching {count} file{plural} (Ctrl+C to stop)."
    INFO_WATCH_STOPPED = "Stopped watching."
    INFO_CONFIG_SUMMARY = (
        "Config file: {path}\n"
        "Converter binary: {binary}\n"
        "Target syntax: {target}\n"
        "Max converter output: {max_output} bytes\n"
        "Converter timeout: {timeout}s\n"
        "Public path: {public_path}\n"
        "Manifest: {manifest}"
    )
    INFO_CONFIG_UPDATED = "Configuration updated."
    INFO_CONFIG_RESET = "Configuration reset to defaults."

    DOCTOR_TITLE = "stylemerge v{version} diagnostics"
    DOCTOR_CMD_FOUND = "`stylemerge` command is available at {path}."
    DOCTOR_CMD_MISSING = "`stylemerge` command is not on PATH."
    DOCTOR_BINARY_FOUND = "Converter binary found at {path}."
    DOCTOR_BINARY_MISSING = "Converter binary `{binary}` not found."
    DOCTOR_BINARY_RUNS = "Converter runs ({version})."
    DOCTOR_BINARY_FAILS = "Converter could not be executed."
    DOCTOR_CONFIG_OK = "Config file is valid ({path})."
    DOCTOR_CONFIG_MISSING = "No config file; defaults are used."
    DOCTOR_CONFIG_INVALID = "Config file {path} could not be parsed."
    DOCTOR_ALL_PASSED = "All checks passed."
    DOCTOR_SOME_FAILED = "Some checks failed."
