from faceguide.cli import main

main()
