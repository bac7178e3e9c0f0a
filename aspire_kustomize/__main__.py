"""Run the aspire-kustomize command line tool with `python -m aspire_kustomize`."""

from aspire_kustomize.tool.aspire_kustomize import main

if __name__ == "__main__":
    main()
