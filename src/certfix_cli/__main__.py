from certfix_cli.cli import run_entrypoint

run_entrypoint()
