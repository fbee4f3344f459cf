from nfs_mounter_agent.main import main

main()
