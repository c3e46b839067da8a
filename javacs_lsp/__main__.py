from javacs_lsp.server import main

main()
