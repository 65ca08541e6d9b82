# qjob_tracker/cli/utils_cli.py
import requests
import typer
import json
from typing import Optional, Dict, Any, Union, List

from .config import QJOB_CLI_API_BASE_URL

# Payload keys that are masked before being echoed to the console
_SECRET_FIELDS = {"password", "api"}


def _mask_payload(json_payload: Dict[str, Any]) -> Dict[str, Any]:
    return {
        key: ("*******" if key in _SECRET_FIELDS and value else value)
        for key, value in json_payload.items()
    }


def make_api_request(
    method: str,
    endpoint: str,
    json_payload: Optional[Dict[str, Any]] = None,
    expected_status: Union[int, List[int]] = 200,
    expect_json_response: bool = True,
) -> Any:
    """
    Makes an HTTP API request and echoes request and response to the console.

    Raises typer.Exit(1) for unexpected statuses and connection failures.
    """
    full_url = f"{QJOB_CLI_API_BASE_URL}{endpoint}"

    typer.echo(f"CLI: {method.upper()} {full_url}")
    if json_payload:
        typer.echo(f"CLI: JSON Payload: {json.dumps(_mask_payload(json_payload), indent=2)}")

    try:
        response = requests.request(method, full_url, json=json_payload, timeout=60)
        typer.echo(f"CLI: Response Status: {response.status_code}")

        expected_statuses = [expected_status] if isinstance(expected_status, int) else expected_status

        if response.status_code in expected_statuses:
            if expect_json_response:
                try:
                    data = response.json()
                    typer.echo(typer.style("CLI: Response JSON:", fg=typer.colors.CYAN))
                    typer.echo(json.dumps(data, indent=2))
                    return data
                except json.JSONDecodeError:
                    typer.secho(
                        f"CLI: Error - Could not decode JSON response. Raw text: {response.text}",
                        fg=typer.colors.RED
                    )
                    raise typer.Exit(code=1)
            typer.echo(typer.style(
                f"CLI: Success (Status {response.status_code}). {response.text[:200]}",
                fg=typer.colors.GREEN
            ))
            return response.text

        err_msg = f"CLI: API Error - Expected status {expected_status}, got {response.status_code}."
        try:
            err_data = response.json()
            err_msg += f" Error: {err_data.get('error', response.text)}"
        except json.JSONDecodeError:
            err_msg += f" Raw response: {response.text}"
        typer.secho(err_msg, fg=typer.colors.RED)
        raise typer.Exit(code=1)

    except requests.exceptions.ConnectionError as e:
        typer.secho(
            f"CLI: Connection Error - Could not connect to API at {full_url}. Is the server running? Error: {e}",
            fg=typer.colors.RED
        )
        raise typer.Exit(code=1)
    except requests.exceptions.RequestException as e:
        typer.secho(f"CLI: Request Error - {e}", fg=typer.colors.RED)
        raise typer.Exit(code=1)
