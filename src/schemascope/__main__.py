from schemascope.cli.commands import run

run()
