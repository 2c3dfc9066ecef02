from diffshot.cli import main

main()
