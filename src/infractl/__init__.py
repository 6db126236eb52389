"""infractl -- command-line client for a cloud infrastructure API.

Most of the client's subcommands (create, list, view, edit and delete for
organizations, projects, disks, VPCs, subnets, routes, images, ...) are not
written by hand. They are generated from the API's OpenAPI description by
the pipeline in :mod:`infractl.generator` and merged with the hand-authored
subcommands declared in :mod:`infractl.resources`.

Typical workflow::

    infractl generate --spec openapi.json   # write the resource modules
    infractl disk list -o acme -p web       # run a generated command

Modules:
    app: Typer application factory and CLI entry point.
    models: Pydantic models shared across the entire package.
    config: XDG-aware configuration with environment overrides.
    exceptions: Exception hierarchy with exit-code mapping.
    exit_codes: Numeric exit codes following clig.dev conventions.
    output: stdout/stderr formatting system with Rich support.
    parser: OpenAPI loading, schema resolution and field extraction.
    generator: The command generator (classifier through assembler).
    runtime: Base classes and collaborators for generated commands.
"""

__version__ = "0.3.0"
