from superstore_pipeline.cli import main

main()
