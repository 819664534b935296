from crediario.config import setup_logging
from crediario.infra.db import engine
from crediario.infra.models import Base


def main():
    setup_logging()
    Base.metadata.create_all(bind=engine)
    print("Tabelas criadas!")


if __name__ == "__main__":
    main()
