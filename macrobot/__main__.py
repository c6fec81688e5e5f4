from macrobot.main import main

main()
