from pin_actions.cli import cli

cli()
