from geofeed_verifier.cli import main

main()
