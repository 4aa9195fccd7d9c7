from slothcomments.cli.main import main

main()
