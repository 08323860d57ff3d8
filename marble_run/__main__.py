from marble_run.cli import main

main()
