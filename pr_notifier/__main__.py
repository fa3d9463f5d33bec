from pr_notifier.cli import main

main()
