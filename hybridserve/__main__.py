from hybridserve.main import main

main()
