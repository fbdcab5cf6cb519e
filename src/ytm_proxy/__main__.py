from ytm_proxy.cli import main

main()
