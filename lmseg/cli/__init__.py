'''
Command line subcommands for lmseg. Every module defines add_arguments(parser) and main(args).
'''
