from forward_ref_codemod.cli import main

if __name__ == "__main__":
    main()
