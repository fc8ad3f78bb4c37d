from appdeploy.main import main

main()
