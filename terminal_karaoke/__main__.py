from terminal_karaoke.cli import main

main()
