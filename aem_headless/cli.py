"""Command-line interface for aem-headless."""

import json
import logging

import click

from .core.client import HeadlessClient, HeadlessClientError
from .core.query import GraphQlQuery, PaginationType
from .core.variables import QueryVariables

PAGINATION_TYPES = {
    "none": PaginationType.NONE,
    "cursor": PaginationType.CURSOR,
    "offset": PaginationType.OFFSET_LIMIT,
}


def parse_variables(values: tuple[str, ...]) -> QueryVariables:
    """Parse ``name=value`` pairs. Values that are valid JSON are decoded, e.g. numbers."""
    variables = QueryVariables.create()
    for pair in values:
        name, sep, raw = pair.partition("=")
        if not sep or not name:
            raise click.BadParameter(f"Expected name=value, got '{pair}'", param_hint="--var")
        try:
            value = json.loads(raw)
        except json.JSONDecodeError:
            value = raw
        variables.add_var(name, value)
    return variables


def create_client(ctx: click.Context) -> HeadlessClient:
    """Create a client from the group options."""
    options = ctx.obj
    if not options.get("endpoint"):
        raise click.UsageError("An endpoint is required, use --endpoint or AEM_ENDPOINT.")

    builder = HeadlessClient.builder().endpoint(options["endpoint"])
    if options.get("token") and options.get("user"):
        raise click.UsageError("Use either --token or --user/--password, not both.")
    if options.get("token"):
        builder.token_auth(options["token"])
    elif options.get("user"):
        builder.basic_auth(options["user"], options.get("password") or "")
    if options.get("transport") is not None:
        builder.transport(options["transport"])
    return builder.build()


def echo_json(value):
    click.echo(json.dumps(value, indent=2))


@click.group()
@click.version_option(package_name="aem-headless-client")
@click.option(
    "--endpoint",
    "-e",
    envvar="AEM_ENDPOINT",
    help="Server URL or GraphQL endpoint URL (env: AEM_ENDPOINT).",
)
@click.option("--token", envvar="AEM_TOKEN", help="Bearer token (env: AEM_TOKEN).")
@click.option("--user", "-u", envvar="AEM_USER", help="User for basic auth (env: AEM_USER).")
@click.option("--password", "-p", envvar="AEM_PASSWORD", help="Password for basic auth (env: AEM_PASSWORD).")
@click.option(
    "--verbose",
    "-v",
    is_flag=True,
    help="Enable verbose output.",
)
@click.pass_context
def main(ctx: click.Context, endpoint, token, user, password, verbose: bool):
    """Query content fragments over the headless GraphQL API."""
    if verbose:
        logging.basicConfig(level=logging.DEBUG)
    ctx.ensure_object(dict)
    ctx.obj.update(endpoint=endpoint, token=token, user=user, password=password)


@main.command()
@click.option("--model", "-m", required=True, help="Content fragment model name, e.g. adventure.")
@click.option("--field", "-f", "fields", multiple=True, required=True, help="Field to select (repeatable).")
@click.option("--sort", "-s", "sort", multiple=True, help="Sort clause like 'title DESC' (repeatable).")
@click.option(
    "--pagination",
    type=click.Choice(sorted(PAGINATION_TYPES)),
    default="none",
    show_default=True,
    help="Pagination of the query.",
)
@click.option("--use-filter", is_flag=True, help="Declare the generic $filter variable.")
@click.option("--var", "variables", multiple=True, help="Query variable as name=value (repeatable).")
@click.option("--page-size", type=click.IntRange(min=1), help="Fetch all pages of a cursor query.")
@click.option("--print-only", is_flag=True, help="Print the generated query instead of running it.")
@click.pass_context
def query(ctx, model, fields, sort, pagination, use_filter, variables, page_size, print_only):
    """Build a query for a content fragment model and run it.

    Examples:

        aem-headless query -m article -f _path -f title --print-only

        aem-headless -e http://localhost:4503 query -m adventure -f title \\
            --pagination cursor --page-size 20
    """
    builder = GraphQlQuery.builder().content_fragment_model_name(model)
    for name in fields:
        builder.field(name)
    if sort:
        try:
            builder.sort_by(*sort)
        except ValueError as e:
            raise click.BadParameter(str(e), param_hint="--sort")
    if use_filter:
        builder.use_filter()
    pagination_type = PAGINATION_TYPES[pagination]
    if pagination_type is not PaginationType.NONE:
        builder.paginated(pagination_type)
    graphql_query = builder.build()

    if print_only:
        click.echo(graphql_query.generate_query(), nl=False)
        return

    if page_size is not None and not pagination_type.is_cursor:
        raise click.UsageError("--page-size requires --pagination cursor.")

    query_variables = parse_variables(variables)
    try:
        with create_client(ctx) as client:
            if page_size is not None:
                cursor = client.create_paging_cursor(graphql_query, page_size, query_variables)
                for page in cursor:
                    echo_json(page.items)
            else:
                echo_json(client.run_query(graphql_query, query_variables).data)
    except (HeadlessClientError, ValueError) as e:
        raise click.ClickException(str(e))


@main.group()
def persisted():
    """List and run persisted queries."""
    pass


@persisted.command("list")
@click.argument("configuration")
@click.pass_context
def list_queries(ctx, configuration):
    """List the persisted queries of a configuration (usually the project name)."""
    try:
        with create_client(ctx) as client:
            queries = client.list_persisted_queries(configuration)
    except HeadlessClientError as e:
        raise click.ClickException(str(e))

    for persisted_query in queries:
        click.echo(persisted_query.short_path)


@persisted.command("run")
@click.argument("path")
@click.option("--var", "variables", multiple=True, help="Query variable as name=value (repeatable).")
@click.pass_context
def run_query(ctx, path, variables):
    """Run a persisted query by its short path, e.g. /myproj/adventures."""
    query_variables = parse_variables(variables)
    try:
        with create_client(ctx) as client:
            response = client.run_persisted_query(path, query_variables)
    except (HeadlessClientError, ValueError) as e:
        raise click.ClickException(str(e))

    echo_json(response.data)


if __name__ == "__main__":
    main()
