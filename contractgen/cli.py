import logging
from typing import Annotated

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.progress import Progress, SpinnerColumn, TextColumn

from contractgen.codegen.codegen import Codegen
from contractgen.config import CodegenConfig, DocumentConfig, get_config
from contractgen.exceptions import ContractGenError

console = Console()
app = typer.Typer(
    name='contractgen',
    help='Generate TypeScript contracts and Express routes from OpenAPI specifications',
    no_args_is_help=True,
)


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format='%(message)s',
        datefmt='[%X]',
        handlers=[RichHandler(console=console, rich_tracebacks=True, show_path=verbose)],
        force=True,
    )


@app.command()
def generate(
    config: Annotated[
        str | None,
        typer.Option('--config', '-c', help='Path to configuration file (YAML)'),
    ] = None,
    source: Annotated[
        str | None,
        typer.Option('--source', '-s', help='Path or URL to the OpenAPI document'),
    ] = None,
    output: Annotated[
        str | None,
        typer.Option('--output', '-o', help='Output directory for generated files'),
    ] = None,
    models_folder: Annotated[
        str, typer.Option('--models-folder', help='Folder name for models')
    ] = 'models',
    controllers_folder: Annotated[
        str,
        typer.Option('--controllers-folder', help='Folder name for controller interfaces'),
    ] = 'controllers',
    routes_folder: Annotated[
        str, typer.Option('--routes-folder', help='Folder name for routes')
    ] = 'routes',
    middleware_config: Annotated[
        str | None,
        typer.Option(
            '--middleware-config',
            help='Middleware policy: YAML/JSON rule file or Python module',
        ),
    ] = None,
    verbose: Annotated[
        bool, typer.Option('--verbose', '-v', help='Enable debug logging')
    ] = False,
) -> None:
    """Generate TypeScript contracts from configuration or command-line options.

    With --source and --output the configuration file is bypassed. Otherwise
    the config is read from --config, contractgen.yaml / contractgen.yml, or
    [tool.contractgen] in pyproject.toml.

    Examples:
        contractgen generate
        contractgen generate --config my-config.yaml
        contractgen generate -s openapi.yaml -o ./generated
    """
    _configure_logging(verbose)

    try:
        if source or output:
            if not (source and output):
                console.print('[red]Error:[/red] --source and --output must be used together')
                raise typer.Exit(1)
            settings = CodegenConfig(
                documents=[
                    DocumentConfig(
                        source=source,
                        output=output,
                        models_folder=models_folder,
                        controllers_folder=controllers_folder,
                        routes_folder=routes_folder,
                        middleware_config=middleware_config,
                    )
                ]
            )
        else:
            settings = get_config(config)

        for document_config in settings.documents:
            with Progress(
                SpinnerColumn(),
                TextColumn('[progress.description]{task.description}'),
                console=console,
            ) as progress:
                task = progress.add_task(
                    f'Generating contracts for {document_config.source} in {document_config.output}...',
                    total=None,
                )

                result = Codegen(document_config).generate()

                progress.update(
                    task,
                    description=f'Code generation completed for {document_config.source}!',
                )

            console.print(
                f'[green]Generated {len(result.declarations)} declarations, '
                f'{len(result.controller_files)} controllers and '
                f'{len(result.route_files)} route files[/green]'
            )
            if result.warnings:
                console.print(
                    f'[yellow]{len(result.warnings)} unresolved type references, see log[/yellow]'
                )
            console.print('[dim]Generated files:[/dim]')
            for path in result.written_files:
                console.print(f'  - {path}')

    except ContractGenError as e:
        console.print(f'[red]Error:[/red] {escape(e.message)}')
        if verbose:
            console.print_exception()
        raise typer.Exit(1)


@app.command()
def version() -> None:
    """Show the version of contractgen."""
    from contractgen import __version__

    console.print(f'contractgen version: {__version__}')


if __name__ == '__main__':
    app()
