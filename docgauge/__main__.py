from docgauge.cli import main

main()
