from icucheck.cli import cli

cli(prog_name="icucheck")
