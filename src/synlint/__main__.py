from synlint.cli.main import main


main()
