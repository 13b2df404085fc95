from paced_io import main

main()
