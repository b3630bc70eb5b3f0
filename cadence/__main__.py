from cadence.cli.board_cli import main

main()
