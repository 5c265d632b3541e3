"""Build, conversion, URL and watch services behind the CLI and API."""
