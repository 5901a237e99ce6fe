"""apitester -- a lightweight command-line alternative to Postman.

Send one-off HTTP requests from the terminal, pretty-print JSON responses,
and save request definitions under a name so they can be replayed later.

Typical workflow::

    apitester send -X POST -u https://httpbin.org/post -d '{"a": 1}'
    apitester save health -u https://api.example.com/health
    apitester run health
    apitester list

Modules:
    app: Typer application and CLI entry point.
    models: Pydantic model for a saved request definition.
    store: JSON-backed saved-request store.
    config: Per-user configuration directory and atomic writes.
    client: Request executor and response renderer built on httpx.
    exceptions: Exception hierarchy with exit-code mapping.
    exit_codes: Numeric exit codes following clig.dev conventions.
    output: Terminal output formatting with Rich support.
"""

__version__ = "0.1.0"
