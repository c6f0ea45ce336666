from citetrail.cli import main

main()
