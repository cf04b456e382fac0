from shell_agent.main import agent

agent()
