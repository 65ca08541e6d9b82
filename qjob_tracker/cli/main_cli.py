# qjob_tracker/cli/main_cli.py
import typer
from typing import Annotated

from .utils_cli import make_api_request

app = typer.Typer(
    name="qjob",
    help="Quantum Job Tracker Command Line Interface.",
    no_args_is_help=True
)


@app.command("signup")
def signup_command(
    username: Annotated[str, typer.Option(help="Unique username.")],
    email: Annotated[str, typer.Option(help="Unique email address.")],
    crn: Annotated[str, typer.Option(help="Service CRN of the quantum instance.")],
    api_key: Annotated[str, typer.Option("--api-key", help="Provider API key.", prompt=True, hide_input=True)],
    password: Annotated[str, typer.Option(prompt=True, hide_input=True, confirmation_prompt=True)],
):
    """Create an account. The API key and CRN are checked with the provider first."""
    payload = {
        "username": username,
        "email": email,
        "password": password,
        "crn": crn,
        "api": api_key,
    }
    data = make_api_request("POST", "/api/signup", json_payload=payload, expected_status=201)
    typer.secho(f"Account created. User ID: {data.get('userId')}", fg=typer.colors.GREEN)


@app.command("login")
def login_command(
    email: Annotated[str, typer.Option(help="Account email address.")],
    password: Annotated[str, typer.Option(prompt=True, hide_input=True)],
):
    """Check an email and password against the server."""
    data = make_api_request("POST", "/api/login", json_payload={"email": email, "password": password})
    typer.secho(f"Logged in as {data.get('username')} ({data.get('userId')}).", fg=typer.colors.GREEN)


@app.command("health")
def health_command():
    """Show server liveness and storage health."""
    make_api_request("GET", "/", expect_json_response=False)
    make_api_request("GET", "/health")


def cli_entry_point():
    """Entry point function for console script registration in pyproject.toml"""
    app()


if __name__ == "__main__":
    cli_entry_point()
