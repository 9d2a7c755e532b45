import kopf

from hpatuner import operator  # noqa: F401  registers the handlers

def main():
    kopf.configure(verbose=False)
    kopf.run(
        standalone=True,
        clusterwide=True,
        liveness_endpoint=operator.CONFIG.liveness_endpoint,
    )

if __name__ == "__main__":
    main()
