from requests_bridge.server import main

main()
