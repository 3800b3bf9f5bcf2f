from tutor_chat.cli import main

main()
